"""
后处理器模块
============

把对话图的终态转换为统一结果，并执行唯一的写入副作用。
"""

from feedmind.postprocessors.base import (
    BasePostProcessor,
    PostProcessRequest,
    classify_result,
    social_post_data,
)
from feedmind.postprocessors.create import CreatePostProcessor
from feedmind.postprocessors.edit import EditPostProcessor
from feedmind.postprocessors.default import DefaultPostProcessor
from feedmind.postprocessors.manager import PostProcessorManager

__all__ = [
    "BasePostProcessor",
    "PostProcessRequest",
    "classify_result",
    "social_post_data",
    "CreatePostProcessor",
    "EditPostProcessor",
    "DefaultPostProcessor",
    "PostProcessorManager",
]
