"""
边与路由模块
============

定义对话图中的条件边和路由逻辑。

路由函数是纯函数：只读取状态中已写入的字段，返回下一个节点名或 END。
每个路由函数的全部可能返回值都登记在 ROUTE_TARGETS 中，
由图引擎在运行时校验。
"""

from typing import Dict, FrozenSet

from langgraph.graph import END

from feedmind.graph.state import ConversationState
from feedmind.types import IntentType, RouteType, SocialAction
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)

# ===== 节点名称 =====
DETECT_INTENT = "detect_intent"
SUPPORT = "support"
POST_QA = "post_qa"
SOCIAL_INTENT = "social_intent"
SOCIAL_PLATFORM_DETECTION = "social_platform_detection"
SOCIAL_POST_SELECTOR = "social_post_selector"
SOCIAL_POST_CREATE = "social_post_create"
SOCIAL_POST_EDIT = "social_post_edit"

_INTENT_ROUTES: Dict[str, str] = {
    IntentType.GENERAL.value: SUPPORT,
    IntentType.ASK_POST.value: POST_QA,
    IntentType.REQ_SOCIAL_POST.value: SOCIAL_INTENT,
    # 只有选择节点能确定待编辑的帖子，编辑节点只能经由它到达
    IntentType.EDIT_SOCIAL_POST.value: SOCIAL_POST_SELECTOR,
}


def route_by_intent(state: ConversationState) -> RouteType:
    """
    意图识别节点后的路由

    CLARIFY_INTENT 时澄清问题已写入 response，本轮直接结束。

    Args:
        state: 当前状态

    Returns:
        下一个节点名称
    """
    intent = (state.get("intent_result") or {}).get("type")

    if intent == IntentType.CLARIFY_INTENT.value:
        logger.debug("[Route] detect_intent -> end (需要澄清)")
        return END

    next_node = _INTENT_ROUTES.get(intent)
    if next_node is None:
        logger.warning(f"[Route] detect_intent -> end (无法识别的意图: {intent!r})")
        return END

    logger.debug(f"[Route] detect_intent -> {next_node}")
    return next_node


def route_by_social_intent(state: ConversationState) -> RouteType:
    action = state.get("social_intent_result")

    if action == SocialAction.CREATE.value:
        logger.debug(f"[Route] social_intent -> {SOCIAL_PLATFORM_DETECTION}")
        return SOCIAL_PLATFORM_DETECTION
    if action == SocialAction.EDIT.value:
        logger.debug(f"[Route] social_intent -> {SOCIAL_POST_SELECTOR}")
        return SOCIAL_POST_SELECTOR

    logger.warning(f"[Route] social_intent -> end (缺少社交意图: {action!r})")
    return END


def route_after_platform(state: ConversationState) -> RouteType:
    """
    平台识别节点后的路由

    只要有平台识别结果就进入生成节点；需要澄清时由生成节点保留澄清回复。
    """
    if state.get("platform_result"):
        logger.debug(f"[Route] social_platform_detection -> {SOCIAL_POST_CREATE}")
        return SOCIAL_POST_CREATE

    logger.warning("[Route] social_platform_detection -> end (缺少平台识别结果)")
    return END


def route_after_selector(state: ConversationState) -> RouteType:
    if state.get("editing_social_post_id"):
        logger.debug(f"[Route] social_post_selector -> {SOCIAL_POST_EDIT}")
        return SOCIAL_POST_EDIT

    logger.debug("[Route] social_post_selector -> end (等待用户选择帖子)")
    return END


# 路由函数允许的目标集合
ROUTE_TARGETS: Dict[str, FrozenSet[str]] = {
    DETECT_INTENT: frozenset({SUPPORT, POST_QA, SOCIAL_INTENT, SOCIAL_POST_SELECTOR, END}),
    SOCIAL_INTENT: frozenset({SOCIAL_PLATFORM_DETECTION, SOCIAL_POST_SELECTOR, END}),
    SOCIAL_PLATFORM_DETECTION: frozenset({SOCIAL_POST_CREATE, END}),
    SOCIAL_POST_SELECTOR: frozenset({SOCIAL_POST_EDIT, END}),
}

ROUTERS = {
    DETECT_INTENT: route_by_intent,
    SOCIAL_INTENT: route_by_social_intent,
    SOCIAL_PLATFORM_DETECTION: route_after_platform,
    SOCIAL_POST_SELECTOR: route_after_selector,
}

# 直接结束的节点
TERMINAL_NODES = (SUPPORT, POST_QA, SOCIAL_POST_CREATE, SOCIAL_POST_EDIT)
