"""
对话轮次服务
============

调用方一侧的单轮对话编排：

1. 从 Memory provider 读取最近对话与会话帖子
2. 创建初始状态并发送 chat:stream:start
3. 运行对话图（进度事件由各节点发送）
4. 后处理（唯一的写入点）并发送 chat:stream:end
5. 记录本轮问答与意图

任何异常都在这里转换为 chat:stream:error 和简短的道歉；
取消的轮次不做后处理，也不写入任何记忆。
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from langchain_core.language_models import BaseChatModel

from feedmind.agents import create_agents
from feedmind.config.settings import Settings, get_settings
from feedmind.graph.builder import create_workflow
from feedmind.graph.context import (
    STREAM_END,
    STREAM_ERROR,
    STREAM_START,
    ExecutionContext,
    NullEventSink,
)
from feedmind.graph.engine import CompiledWorkflow
from feedmind.graph.state import create_initial_state
from feedmind.memory import ConversationMemory, SocialPostStore
from feedmind.postprocessors import PostProcessorManager, PostProcessRequest
from feedmind.types import (
    EventSink,
    MemoryProvider,
    PersistenceProvider,
    PostContext,
    PostProcessorResult,
    TurnCancelledError,
)
from feedmind.utils.logger import session_logger
from feedmind.utils.visualizer import ExecutionVisualizer

APOLOGY = "An error occurred while processing your request."


class ConversationStore(MemoryProvider, Protocol):
    """在 Memory provider 的基础上支持写回问答与意图"""

    def append_exchange(
        self, session_id: str, user_message: str, ai_response: str, social_post_id: Optional[str] = None
    ) -> None: ...
    def get_last_intent(self, session_id: str) -> Optional[str]: ...
    def set_last_intent(self, session_id: str, intent: Optional[str]) -> None: ...


class ChatTurnService:
    """
    单轮对话服务

    使用示例：
        >>> service = ChatTurnService.from_settings()
        >>> result = await service.run_turn("Create a LinkedIn post", session_id="s1", user_id="u1", post=article)
        >>> print(result.response)

    属性:
        workflow: 编译后的对话图，所有会话共享
        memory: 对话记忆
        postprocessors: 后处理器管理器
        settings: 系统配置
    """

    def __init__(
        self,
        workflow: CompiledWorkflow,
        memory: ConversationStore,
        postprocessors: PostProcessorManager,
        settings: Optional[Settings] = None,
    ):
        self.workflow = workflow
        self.memory = memory
        self.postprocessors = postprocessors
        self.settings = settings or get_settings()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        llm: Optional[BaseChatModel] = None,
        memory: Optional[ConversationStore] = None,
        persistence: Optional[PersistenceProvider] = None,
    ) -> "ChatTurnService":
        """
        在进程启动时一次性组装全部依赖

        Args:
            settings: 系统配置
            llm: 所有 Agent 共享的语言模型，None 时按配置创建
            memory: 对话记忆，None 时创建内存实现
            persistence: 帖子存储，None 时使用 SOCIAL_POSTS_PATH 文件
        """
        settings = settings or get_settings()
        if persistence is None:
            persistence = SocialPostStore(settings.social_posts_path)
        if memory is None:
            memory = ConversationMemory(window=settings.history_window, post_store=persistence)

        workflow = create_workflow(create_agents(settings, llm), settings)
        return cls(workflow, memory, PostProcessorManager(persistence, settings), settings)

    async def run_turn(
        self,
        message: str,
        session_id: str,
        user_id: str,
        post: Optional[PostContext] = None,
        post_id: Optional[str] = None,
        content_preferences: Optional[str] = None,
        sink: Optional[EventSink] = None,
        context: Optional[ExecutionContext] = None,
    ) -> Optional[PostProcessorResult]:
        """
        处理一条用户消息

        Args:
            message: 用户消息
            session_id: 会话 ID
            user_id: 用户 ID
            post: 当前文章
            post_id: 当前文章 ID
            content_preferences: 用户的社交内容偏好
            sink: 事件出口，context 为空时使用
            context: 执行上下文，调用方持有它以便取消本轮对话

        Returns:
            后处理结果；本轮被取消或失败时返回 None（失败已通过 chat:stream:error 通知）
        """
        log = session_logger(__name__, session_id)
        context = context or ExecutionContext(session_id=session_id, sink=sink or NullEventSink())
        log.info(f"[Turn] 开始处理消息: {message[:50]}")
        await context.emit(STREAM_START, {"session_id": session_id})

        try:
            final_state = await self._run_graph(message, session_id, user_id, post, content_preferences, context, log)

            context.raise_if_cancelled()
            result = await self.postprocessors.process(PostProcessRequest(
                result=final_state,
                session_id=session_id,
                user_id=user_id,
                message=message,
                post_id=post_id,
                context=context,
            ))
        except TurnCancelledError as e:
            log.info(f"[Turn] {e}")
            return None
        except Exception as e:
            log.error(f"[Turn] 处理失败: {e}", exc_info=True)
            await context.emit(STREAM_ERROR, {"session_id": session_id, "message": APOLOGY, "error": str(e)})
            return None

        self._remember(session_id, message, result, final_state)
        log.info(f"[Turn] 完成，社交帖子: {result.social_post_id or '无'}")
        await context.emit(STREAM_END, {"session_id": session_id, **result.model_dump()})
        return result

    async def _run_graph(
        self,
        message: str,
        session_id: str,
        user_id: str,
        post: Optional[PostContext],
        content_preferences: Optional[str],
        context: ExecutionContext,
        log: logging.LoggerAdapter,
    ) -> Dict[str, Any]:
        window = self.settings.history_window
        last_messages = await self.memory.load_recent_messages(session_id, window)
        posts = await self.memory.load_session_posts(session_id)

        initial_state = create_initial_state(
            message=message,
            session_id=session_id,
            user_id=user_id,
            last_messages=last_messages,
            last_intent=self.memory.get_last_intent(session_id),
            post=post,
            social_posts_history=posts,
            content_preferences=content_preferences,
            history_window=window,
        )
        if not self.settings.debug_mode:
            return await self.workflow.ainvoke(initial_state, context)

        # 调试模式逐节点运行，记录本轮路径
        path: List[str] = []
        final_state: Dict[str, Any] = dict(initial_state)
        async for node_name, snapshot in self.workflow.stream(initial_state, context):
            path.append(node_name)
            final_state = snapshot
        visualizer = ExecutionVisualizer()
        log.debug(
            "[Turn] 执行轨迹\n"
            + visualizer.generate_text_trace(path, final_state)
            + "\n"
            + visualizer.generate_summary(final_state)
        )
        return final_state

    def _remember(
        self,
        session_id: str,
        message: str,
        result: PostProcessorResult,
        final_state: Mapping[str, Any],
    ) -> None:
        ai_response = result.response
        if result.is_social_post and result.structured_post:
            ai_response = f"{result.response}\n\n{result.structured_post.get('post_content', '')}".strip()
        self.memory.append_exchange(session_id, message, ai_response, result.social_post_id)

        intent = (final_state.get("intent_result") or {}).get("type")
        self.memory.set_last_intent(session_id, intent)
