"""
节点函数模块
============

定义对话图中的所有节点处理函数。

每个节点的流程一致：
1. 通过执行上下文发送进度提示
2. 从状态中取出最少的必要输入
3. 至多调用一个能力 Agent（调用可被取消）
4. 把 Agent 结果转换为本节点负责的字段并返回

缺少前置条件（没有平台、没有文章内容、找不到帖子）时不抛异常，
而是返回面向用户的说明并设置 error，本轮对话正常结束。
"""

from typing import Any, Callable, Dict, List, Optional

from feedmind.agents import CapabilityAgents
from feedmind.config.settings import Settings, get_settings
from feedmind.graph.context import ExecutionContext
from feedmind.graph.edges import (
    DETECT_INTENT,
    POST_QA,
    SOCIAL_INTENT,
    SOCIAL_PLATFORM_DETECTION,
    SOCIAL_POST_CREATE,
    SOCIAL_POST_EDIT,
    SOCIAL_POST_SELECTOR,
    SUPPORT,
)
from feedmind.graph.state import ConversationState
from feedmind.types import (
    IntentInput,
    IntentType,
    PlatformInput,
    PostCreateInput,
    PostEditInput,
    PostQAInput,
    PostSelectorInput,
    SocialAction,
    SocialIntentInput,
    SocialPlatform,
    SupportInput,
)
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)

# ===== 面向用户的固定回复 =====
CLARIFY_FALLBACK = "Could you tell me a bit more about what you would like to do?"
PLATFORM_QUESTION = "Which platform would you like to create a post for?"
NO_PLATFORM_RESPONSE = "I need to know which platform to create content for. Please specify Twitter or LinkedIn."
NO_CONTENT_RESPONSE = "I need article content to create a social post from. Please select an article first."
NO_POSTS_RESPONSE = (
    "No social posts found in this session. Create a post first before trying to edit."
)
POST_NOT_FOUND_RESPONSE = (
    "The selected post could not be found. Please describe the post you want to edit and try again."
)
SELECT_POST_RESPONSE = "Which post would you like to edit?"


def post_option(post: Dict[str, Any]) -> str:
    """帖子的简短描述，作为选择提示的选项"""
    platform = str(post.get("platform", "")).capitalize()
    return f"{platform}: {str(post.get('content', ''))[:40]}..."


class ConversationNodes:
    """
    对话图节点集合

    持有启动时创建的能力 Agent；节点方法本身不保存任何单轮数据，
    同一实例可被多个并发会话共享。

    属性:
        agents: 能力 Agent 集合
        settings: 系统配置
    """

    def __init__(self, agents: CapabilityAgents, settings: Optional[Settings] = None):
        self.agents = agents
        self.settings = settings or get_settings()

    def handlers(self) -> Dict[str, Callable]:
        """节点名到处理函数的映射"""
        return {
            DETECT_INTENT: self.detect_intent,
            SUPPORT: self.support,
            POST_QA: self.post_qa,
            SOCIAL_INTENT: self.social_intent,
            SOCIAL_PLATFORM_DETECTION: self.social_platform_detection,
            SOCIAL_POST_SELECTOR: self.social_post_selector,
            SOCIAL_POST_CREATE: self.social_post_create,
            SOCIAL_POST_EDIT: self.social_post_edit,
        }

    # ===== 意图识别 =====

    async def detect_intent(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        """
        意图识别节点（入口）

        Args:
            state: 当前状态
            context: 执行上下文

        Returns:
            状态更新：intent_result；需要澄清时附带 response 与 suggested_options
        """
        await context.emit_token("Detecting your intent...")

        result = await context.run_cancellable(
            self.agents.intent.ainvoke(IntentInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                last_intent=state.get("last_intent"),
            )),
            node=DETECT_INTENT,
        )
        logger.info(f"[Node] detect_intent - 意图 {result.type} (置信度 {result.confidence:.2f})")

        update: Dict[str, Any] = {"intent_result": result.model_dump()}
        if result.type == IntentType.CLARIFY_INTENT.value:
            update.update(
                response=result.clarifying_question or CLARIFY_FALLBACK,
                suggested_options=result.suggested_options or [],
                is_social_post=False,
            )
        return update

    async def social_intent(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        """
        社交意图节点

        会话中还没有任何帖子时只能新建，不调用 Agent。
        """
        await context.emit_token("Determining social intent...")

        if not state.get("social_posts_history"):
            logger.info("[Node] social_intent - 会话中没有社交帖子，直接判定为 CREATE")
            return {"social_intent_result": SocialAction.CREATE.value}

        result = await context.run_cancellable(
            self.agents.social_intent.ainvoke(SocialIntentInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
            )),
            node=SOCIAL_INTENT,
        )
        logger.info(f"[Node] social_intent - {result.action} (置信度 {result.confidence:.2f})")
        return {"social_intent_result": result.action}

    # ===== 新建帖子 =====

    async def social_platform_detection(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        await context.emit_token("Detecting target platform...")

        result = await context.run_cancellable(
            self.agents.platform.ainvoke(PlatformInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
            )),
            node=SOCIAL_PLATFORM_DETECTION,
        )

        platform_result: Dict[str, Any] = {
            "platform": result.platform,
            "confidence": result.confidence,
            "needs_clarification": result.needs_clarification,
            "clarification_message": None,
        }
        update: Dict[str, Any] = {"platform_result": platform_result}

        if result.needs_clarification:
            question = result.message or PLATFORM_QUESTION
            platform_result["clarification_message"] = question
            update.update(
                response=question,
                suggested_options=result.suggested_options or [p.value.capitalize() for p in SocialPlatform],
                is_social_post=False,
            )
            logger.info("[Node] social_platform_detection - 需要用户确认平台")
        else:
            logger.info(f"[Node] social_platform_detection - 平台 {result.platform}")

        return update

    async def social_post_create(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        """
        社交帖子生成节点

        平台未确定时保留平台识别节点给出的澄清回复，只标记 error。
        """
        await context.emit_token("Generating social media post...")

        platform_result = state.get("platform_result") or {}
        platform = platform_result.get("platform")

        if not platform or platform_result.get("needs_clarification"):
            logger.warning("[Node] social_post_create - 未确定目标平台")
            if platform_result.get("clarification_message"):
                return {"is_social_post": False, "error": "No platform detected"}
            return {
                "response": NO_PLATFORM_RESPONSE,
                "suggested_options": ["Twitter", "LinkedIn"],
                "is_social_post": False,
                "error": "No platform detected",
            }

        post_content = ((state.get("post") or {}).get("content") or "").strip()
        if not post_content:
            logger.warning("[Node] social_post_create - 当前没有文章内容")
            return {
                "response": NO_CONTENT_RESPONSE,
                "suggested_options": [],
                "is_social_post": False,
                "error": "No post content available",
            }

        result = await context.run_cancellable(
            self.agents.post_create.ainvoke(PostCreateInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                post_content=post_content,
                platform=platform,
                content_preferences=state.get("social_media_content_preferences"),
            )),
            node=SOCIAL_POST_CREATE,
        )
        logger.info(f"[Node] social_post_create - 已生成 {platform} 帖子，{len(result.structured_post.post_content)} 字符")

        return {
            "response": result.message,
            "structured_post": result.structured_post.model_dump(),
            "suggested_options": result.suggested_options or [],
            "is_social_post": True,
        }

    # ===== 编辑帖子 =====

    async def social_post_selector(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        """
        帖子选择节点

        处理顺序：
        1. 会话中没有帖子：直接提示先创建，不调用 Agent
        2. 只有一篇且开启自动选择：直接选中
        3. 调用 Agent，并校验返回的 ID 确实存在
        """
        await context.emit_token("Identifying which post to edit...")

        history: List[Dict[str, Any]] = state.get("social_posts_history") or []

        if not history:
            logger.info("[Node] social_post_selector - 会话中没有可编辑的帖子")
            return {
                "response": NO_POSTS_RESPONSE,
                "suggested_options": ["Create a Twitter post", "Create a LinkedIn post"],
                "is_social_post": False,
                "error": "No social posts in session",
            }

        if len(history) == 1 and self.settings.auto_select_single_post:
            post_id = history[0]["id"]
            logger.info(f"[Node] social_post_selector - 自动选择唯一的帖子 {post_id}")
            return {"editing_social_post_id": post_id}

        result = await context.run_cancellable(
            self.agents.post_selector.ainvoke(PostSelectorInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                social_posts_history=history,
            )),
            node=SOCIAL_POST_SELECTOR,
        )

        selected = result.selected_post_id
        if selected:
            if any(p.get("id") == selected for p in history):
                logger.info(f"[Node] social_post_selector - 选中帖子 {selected} (置信度 {result.confidence:.2f})")
                return {"editing_social_post_id": selected}

            logger.warning(f"[Node] social_post_selector - Agent 返回的帖子 {selected} 不在会话中")
            return {
                "response": POST_NOT_FOUND_RESPONSE,
                "suggested_options": [post_option(p) for p in history],
                "is_social_post": False,
                "error": f"Selected social post {selected} not found",
            }

        return {
            "response": result.message or SELECT_POST_RESPONSE,
            "suggested_options": result.suggested_options or [post_option(p) for p in history],
            "is_social_post": False,
        }

    async def social_post_edit(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        await context.emit_token("Editing social media post...")

        post_id = state.get("editing_social_post_id")
        history = state.get("social_posts_history") or []
        target = next((p for p in history if p.get("id") == post_id), None)

        if target is None:
            logger.warning(f"[Node] social_post_edit - 找不到帖子 {post_id}")
            return {
                "response": POST_NOT_FOUND_RESPONSE,
                "suggested_options": [post_option(p) for p in history],
                "is_social_post": False,
                "error": f"Social post {post_id} not found",
            }

        result = await context.run_cancellable(
            self.agents.post_edit.ainvoke(PostEditInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                target_post=target,
                post_content=(state.get("post") or {}).get("content"),
                content_preferences=state.get("social_media_content_preferences"),
            )),
            node=SOCIAL_POST_EDIT,
        )
        logger.info(f"[Node] social_post_edit - 已编辑帖子 {post_id}")

        return {
            "response": result.message,
            "structured_post": result.structured_post.model_dump(),
            "suggested_options": result.suggested_options or [],
            "is_social_post": True,
        }

    # ===== 对话 =====

    async def post_qa(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        await context.emit_token("Analyzing the post and your question...")

        post = state.get("post") or {}
        result = await context.run_cancellable(
            self.agents.post_qa.ainvoke(PostQAInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                post_summary=post.get("summary") or "",
                post_content=post.get("content") or "",
            )),
            node=POST_QA,
        )
        return {
            "response": result.response,
            "suggested_options": result.suggested_options or [],
            "is_social_post": False,
        }

    async def support(self, state: ConversationState, context: ExecutionContext) -> Dict[str, Any]:
        await context.emit_token("Generating a helpful response...")

        post = state.get("post") or {}
        result = await context.run_cancellable(
            self.agents.support.ainvoke(SupportInput(
                message=state["message"],
                last_messages=state.get("last_messages") or [],
                post_title=post.get("title"),
                post_summary=post.get("summary"),
            )),
            node=SUPPORT,
        )
        return {
            "response": result.response,
            "suggested_options": result.suggested_options or [],
            "is_social_post": False,
        }
