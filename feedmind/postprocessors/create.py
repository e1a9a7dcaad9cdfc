"""
新建帖子后处理器
================
"""

from feedmind.postprocessors.base import BasePostProcessor, PostProcessRequest, social_post_data
from feedmind.types import PersistenceProvider, PostProcessorResult, ResultKind
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


class CreatePostProcessor(BasePostProcessor):
    """把新生成的社交帖子写入持久层，返回新帖子的 ID"""

    kind = ResultKind.CREATE

    def __init__(self, persistence: PersistenceProvider):
        self.persistence = persistence

    async def process(self, request: PostProcessRequest) -> PostProcessorResult:
        state = request.result
        structured_post = dict(state["structured_post"])
        platform = state["platform_result"]["platform"]

        record = await self.persistence.create_social_post(
            request.session_id,
            request.user_id,
            request.post_id,
            social_post_data(structured_post, platform),
        )
        logger.info(f"[PostProcessor] 新建 {platform} 帖子 {record.id} (会话 {request.session_id})")

        return PostProcessorResult(
            social_post_id=record.id,
            response=state.get("response") or "",
            suggested_options=self._options(state),
            is_social_post=True,
            structured_post=structured_post,
        )
