"""
后处理器管理模块
================

对终态执行恰好一次后处理。

分派顺序：
1. 自定义后处理器，按注册位置依次检查 can_handle，第一个匹配的执行
2. 按 classify_result 的结果分派给对应的内置后处理器

内置后处理器覆盖全部分类，找不到处理器属于编程错误。
"""

from typing import Dict, List, Optional

from feedmind.config.settings import Settings, get_settings
from feedmind.postprocessors.base import BasePostProcessor, PostProcessRequest, classify_result
from feedmind.postprocessors.create import CreatePostProcessor
from feedmind.postprocessors.default import DefaultPostProcessor
from feedmind.postprocessors.edit import EditPostProcessor
from feedmind.types import (
    NoProcessorFoundError,
    PersistenceProvider,
    PostProcessorResult,
    ResultKind,
)
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


class PostProcessorManager:
    """
    后处理器管理器

    使用示例：
        >>> manager = PostProcessorManager(persistence)
        >>> result = await manager.process(PostProcessRequest(result=final_state, session_id="s1", user_id="u1"))
    """

    def __init__(self, persistence: PersistenceProvider, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self._builtin: Dict[ResultKind, BasePostProcessor] = {
            ResultKind.EDIT: EditPostProcessor(persistence),
            ResultKind.CREATE: CreatePostProcessor(persistence),
            ResultKind.PASSTHROUGH: DefaultPostProcessor(settings.default_response),
        }
        self._custom: List[BasePostProcessor] = []

    def register_processor(self, processor: BasePostProcessor, position: Optional[int] = None) -> None:
        """
        注册自定义后处理器

        自定义后处理器总是先于内置后处理器检查。

        Args:
            processor: 后处理器实例
            position: 在自定义列表中的位置，None 追加到末尾
        """
        if position is None:
            self._custom.append(processor)
        else:
            self._custom.insert(position, processor)
        logger.info(f"[PostProcessor] 注册自定义后处理器 {processor.name}")

    @property
    def processors(self) -> List[BasePostProcessor]:
        """按检查顺序排列的全部后处理器"""
        return [*self._custom, *self._builtin.values()]

    def select(self, request: PostProcessRequest) -> BasePostProcessor:
        for processor in self._custom:
            if processor.can_handle(request.result):
                return processor

        kind = classify_result(request.result)
        processor = self._builtin.get(kind)
        if processor is None:
            raise NoProcessorFoundError(kind.value)
        return processor

    async def process(self, request: PostProcessRequest) -> PostProcessorResult:
        """
        执行后处理

        Args:
            request: 后处理请求

        Returns:
            统一的结果结构

        Raises:
            NoProcessorFoundError: 没有匹配的后处理器
        """
        processor = self.select(request)
        logger.info(f"[PostProcessor] 会话 {request.session_id} 使用 {processor.name}")
        return await processor.process(request)
