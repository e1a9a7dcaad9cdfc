"""
状态定义模块
============

定义对话图使用的状态结构。

ConversationState 是一轮对话的状态容器，每条用户消息新建一份，
在各节点间传递并以浅合并的方式累积各节点的输出，轮次结束后丢弃。
嵌套结果统一保存为普通 dict，便于快照比较与序列化。
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypedDict, Union

from feedmind.types import (
    MAX_HISTORY_PAIRS,
    PostContext,
    SimplifiedMessage,
    SocialPostRecord,
)
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


class IntentResultState(TypedDict, total=False):
    type: str
    confidence: float
    reasoning: str
    clarifying_question: Optional[str]
    suggested_options: Optional[List[str]]


class PlatformResultState(TypedDict, total=False):
    platform: Optional[str]
    confidence: float
    needs_clarification: bool
    clarification_message: Optional[str]


class ConversationState(TypedDict, total=False):
    """
    单轮对话状态

    状态字段说明：

    输入（创建后只读）：
        message: 当前用户消息
        session_id / user_id: 会话与用户标识
        last_messages: 最近的对话窗口，最多 MAX_HISTORY_PAIRS 对
        last_intent: 上一轮识别出的意图
        post: 当前文章上下文
        social_media_content_preferences: 用户的内容偏好
        social_posts_history: 本会话已生成帖子的快照

    中间结果：
        intent_result: 意图识别结果，由 detect_intent 写入
        social_intent_result: CREATE / EDIT
        platform_result: 平台识别结果
        editing_social_post_id: 已确定的待编辑帖子 ID

    终态输出：
        structured_post / response / suggested_options / is_social_post / error
    """

    # ===== 输入 =====
    message: str
    session_id: str
    user_id: str
    last_messages: List[Dict[str, str]]
    last_intent: Optional[str]
    post: Optional[Dict[str, Any]]
    social_media_content_preferences: Optional[str]
    social_posts_history: List[Dict[str, Any]]

    # ===== 中间结果 =====
    intent_result: IntentResultState
    social_intent_result: str
    platform_result: PlatformResultState
    editing_social_post_id: str

    # ===== 终态输出 =====
    structured_post: Dict[str, Any]
    response: str
    suggested_options: List[str]
    is_social_post: bool
    error: str


def _bounded_history(
    last_messages: Optional[Iterable[Union[SimplifiedMessage, Mapping[str, Any]]]],
    window: int,
) -> List[Dict[str, str]]:
    pairs = [
        m.model_dump() if isinstance(m, SimplifiedMessage) else SimplifiedMessage.model_validate(m).model_dump()
        for m in (last_messages or [])
    ]
    window = min(window, MAX_HISTORY_PAIRS)
    if len(pairs) > window:
        logger.warning(f"对话窗口 {len(pairs)} 对超过上限 {window}，只保留最近的 {window} 对")
        pairs = pairs[-window:] if window else []
    return pairs


def create_initial_state(
    message: str,
    session_id: str,
    user_id: str,
    last_messages: Optional[Sequence[Union[SimplifiedMessage, Mapping[str, Any]]]] = None,
    last_intent: Optional[str] = None,
    post: Optional[Union[PostContext, Mapping[str, Any]]] = None,
    social_posts_history: Optional[Sequence[Union[SocialPostRecord, Mapping[str, Any]]]] = None,
    content_preferences: Optional[str] = None,
    history_window: int = MAX_HISTORY_PAIRS,
) -> ConversationState:
    """
    创建初始状态

    对话窗口在这里统一截断，图内的节点与 Agent 不再做任何截断。

    Args:
        message: 用户消息
        session_id: 会话 ID
        user_id: 用户 ID
        last_messages: 最近对话，按时间顺序
        last_intent: 上一轮意图
        post: 当前文章
        social_posts_history: 会话中已有的社交帖子
        content_preferences: 用户的社交内容偏好
        history_window: 窗口大小，不超过 MAX_HISTORY_PAIRS

    Returns:
        初始化的 ConversationState
    """
    if isinstance(post, PostContext):
        post = post.model_dump()

    history = [
        p.to_snapshot() if isinstance(p, SocialPostRecord) else dict(p)
        for p in (social_posts_history or [])
    ]

    state = ConversationState(
        message=message,
        session_id=session_id,
        user_id=user_id,
        last_messages=_bounded_history(last_messages, history_window),
        last_intent=last_intent,
        post=dict(post) if post else None,
        social_media_content_preferences=content_preferences,
        social_posts_history=history,
    )
    return state
