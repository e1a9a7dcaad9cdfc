"""
编辑帖子后处理器
================
"""

from typing import Any, Mapping, Optional

from feedmind.postprocessors.base import BasePostProcessor, PostProcessRequest, social_post_data
from feedmind.types import PersistenceProvider, PostProcessorResult, ResultKind
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


def editing_platform(state: Mapping[str, Any]) -> Optional[str]:
    """被编辑帖子的平台取自会话历史中的原记录"""
    post_id = state.get("editing_social_post_id")
    for post in state.get("social_posts_history") or []:
        if post.get("id") == post_id:
            return post.get("platform")
    return (state.get("platform_result") or {}).get("platform")


class EditPostProcessor(BasePostProcessor):
    """用编辑结果更新 editing_social_post_id 对应的帖子"""

    kind = ResultKind.EDIT

    def __init__(self, persistence: PersistenceProvider):
        self.persistence = persistence

    async def process(self, request: PostProcessRequest) -> PostProcessorResult:
        state = request.result
        social_post_id = state["editing_social_post_id"]
        structured_post = dict(state["structured_post"])
        platform = editing_platform(state)
        if platform is None:
            raise ValueError(f"无法确定帖子 {social_post_id} 的平台")

        record = await self.persistence.update_social_post(
            request.session_id,
            social_post_id,
            request.user_id,
            social_post_data(structured_post, platform),
        )
        logger.info(f"[PostProcessor] 更新帖子 {record.id} (会话 {request.session_id})")

        return PostProcessorResult(
            social_post_id=record.id,
            response=state.get("response") or "",
            suggested_options=self._options(state),
            is_social_post=True,
            structured_post=structured_post,
        )
