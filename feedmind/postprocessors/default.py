"""
默认后处理器
============

原样返回回复，没有任何副作用。
"""

from feedmind.postprocessors.base import BasePostProcessor, PostProcessRequest
from feedmind.types import PostProcessorResult, ResultKind

DEFAULT_RESPONSE = "I'm not sure how to help with that."


class DefaultPostProcessor(BasePostProcessor):

    kind = ResultKind.PASSTHROUGH

    def __init__(self, default_response: str = DEFAULT_RESPONSE):
        self.default_response = default_response

    async def process(self, request: PostProcessRequest) -> PostProcessorResult:
        state = request.result
        return PostProcessorResult(
            response=state.get("response") or self.default_response,
            suggested_options=self._options(state),
            is_social_post=False,
        )
