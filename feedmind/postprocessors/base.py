"""
后处理器基类模块
================

对话图结束后，根据终态决定要执行的副作用并返回统一的结果结构。

终态先由 classify_result 归为 CREATE / EDIT / PASSTHROUGH 三类之一，
每个内置后处理器只处理一类，因此对任意终态恰好有一个内置后处理器匹配。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from feedmind.graph.context import ExecutionContext
from feedmind.types import (
    CodeExample,
    PostProcessorResult,
    ResultKind,
    SocialPostData,
    VisualElement,
)


def classify_result(state: Mapping[str, Any]) -> ResultKind:
    """
    终态分类

    - EDIT: 生成了帖子且已确定待编辑的帖子
    - CREATE: 生成了帖子、平台已知且不是编辑
    - PASSTHROUGH: 其余情况，原样返回回复
    """
    if state.get("is_social_post") and state.get("structured_post"):
        if state.get("editing_social_post_id"):
            return ResultKind.EDIT
        if (state.get("platform_result") or {}).get("platform"):
            return ResultKind.CREATE
    return ResultKind.PASSTHROUGH


@dataclass
class PostProcessRequest:
    """
    后处理请求

    属性:
        result: 对话图的终态
        session_id: 会话 ID
        user_id: 用户 ID
        message: 本轮用户消息
        post_id: 当前文章 ID
        context: 执行上下文，用于发送事件
    """

    result: Mapping[str, Any]
    session_id: str
    user_id: str
    message: str = ""
    post_id: Optional[str] = None
    context: Optional[ExecutionContext] = None

    async def emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self.context is not None:
            await self.context.emit(event, payload)


def social_post_data(structured_post: Mapping[str, Any], platform: str) -> SocialPostData:
    """把结构化帖子转换为持久层的数据结构"""
    return SocialPostData(
        content=structured_post["post_content"],
        platform=platform,
        code_examples=[CodeExample.model_validate(c) for c in structured_post.get("code_examples") or []],
        visual_elements=[VisualElement.model_validate(v) for v in structured_post.get("visual_elements") or []],
    )


class BasePostProcessor(ABC):
    """
    后处理器抽象基类

    子类声明 kind 并实现 process；can_handle 默认按终态分类判断。
    """

    kind: Optional[ResultKind] = None

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def can_handle(self, state: Mapping[str, Any]) -> bool:
        return self.kind is not None and classify_result(state) == self.kind

    @abstractmethod
    async def process(self, request: PostProcessRequest) -> PostProcessorResult:
        """
        执行副作用并返回结果

        Args:
            request: 后处理请求

        Returns:
            统一的结果结构
        """

    @staticmethod
    def _options(state: Mapping[str, Any]) -> List[str]:
        return list(state.get("suggested_options") or [])
