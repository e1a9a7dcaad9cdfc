"""
FeedMind
========

面向文章阅读场景的对话助手后端：识别用户意图，回答关于文章的问题，
生成或修改社交平台帖子。

主要特性：
- 基于 LangGraph 的意图路由状态机
- 类型化的能力 Agent（结构化输出校验）
- 流式进度事件与可取消的轮次
- 统一的后处理与唯一写入点

使用示例：
    >>> from feedmind import ChatTurnService
    >>> service = ChatTurnService.from_settings()
    >>> result = await service.run_turn("What's this article about?", session_id="s1", user_id="u1", post=article)
    >>> print(result.response)
"""

__version__ = "1.0.0"
__author__ = "FeedMind Team"

from feedmind.config.settings import Settings, get_settings
from feedmind.graph.builder import build_graph, create_workflow
from feedmind.graph.state import ConversationState, create_initial_state
from feedmind.services.chat_turn import ChatTurnService

__all__ = [
    "ChatTurnService",
    "build_graph",
    "create_workflow",
    "Settings",
    "get_settings",
    "ConversationState",
    "create_initial_state",
    "__version__",
]
