"""
类型模块
========

集中导出对话系统使用的枚举、模型、协议与异常。
"""

from feedmind.types.types import (
    MAX_HISTORY_PAIRS,
    IntentType,
    SocialAction,
    SocialPlatform,
    ResultKind,
    RouteType,
    SimplifiedMessage,
    PostContext,
    CodeExample,
    VisualElement,
    StructuredPost,
    SocialPostRecord,
    SocialPostData,
    SocialPostSnapshot,
    IntentInput,
    SocialIntentInput,
    PlatformInput,
    PostSelectorInput,
    PostCreateInput,
    PostEditInput,
    PostQAInput,
    SupportInput,
    IntentOutput,
    SocialIntentOutput,
    PlatformOutput,
    PostSelectorOutput,
    PostGenerationOutput,
    ConversationalOutput,
    PostProcessorResult,
    EventSink,
    MemoryProvider,
    PersistenceProvider,
    NodeHandler,
    RouterFunction,
)
from feedmind.types.errors import (
    FeedMindError,
    GraphConfigurationError,
    DuplicateNodeError,
    GraphValidationError,
    RoutingError,
    NoProcessorFoundError,
    SchemaValidationError,
    NodeExecutionError,
    TurnCancelledError,
    SocialPostNotFoundError,
)

__all__ = [
    "MAX_HISTORY_PAIRS",
    "IntentType",
    "SocialAction",
    "SocialPlatform",
    "ResultKind",
    "RouteType",
    "SimplifiedMessage",
    "PostContext",
    "CodeExample",
    "VisualElement",
    "StructuredPost",
    "SocialPostRecord",
    "SocialPostData",
    "SocialPostSnapshot",
    "IntentInput",
    "SocialIntentInput",
    "PlatformInput",
    "PostSelectorInput",
    "PostCreateInput",
    "PostEditInput",
    "PostQAInput",
    "SupportInput",
    "IntentOutput",
    "SocialIntentOutput",
    "PlatformOutput",
    "PostSelectorOutput",
    "PostGenerationOutput",
    "ConversationalOutput",
    "PostProcessorResult",
    "EventSink",
    "MemoryProvider",
    "PersistenceProvider",
    "NodeHandler",
    "RouterFunction",
    "FeedMindError",
    "GraphConfigurationError",
    "DuplicateNodeError",
    "GraphValidationError",
    "RoutingError",
    "NoProcessorFoundError",
    "SchemaValidationError",
    "NodeExecutionError",
    "TurnCancelledError",
    "SocialPostNotFoundError",
]
