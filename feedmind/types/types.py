"""
类型定义模块
============
集中定义对话图、能力 Agent 与后处理器共用的类型，确保类型安全和一致性。
"""
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Protocol,
    Union,
)
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

# 对话窗口上限：状态中 last_messages 的唯一来源
MAX_HISTORY_PAIRS = 10


class IntentType(str, Enum):
    GENERAL = "GENERAL"
    ASK_POST = "ASK_POST"
    REQ_SOCIAL_POST = "REQ_SOCIAL_POST"
    EDIT_SOCIAL_POST = "EDIT_SOCIAL_POST"
    CLARIFY_INTENT = "CLARIFY_INTENT"


class SocialAction(str, Enum):
    CREATE = "CREATE"
    EDIT = "EDIT"


class SocialPlatform(str, Enum):
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"


class ResultKind(str, Enum):
    """终态分类：决定后处理器执行哪一种副作用"""
    CREATE = "create"
    EDIT = "edit"
    PASSTHROUGH = "passthrough"


RouteType = Literal[
    "detect_intent",
    "support",
    "post_qa",
    "social_intent",
    "social_platform_detection",
    "social_post_selector",
    "social_post_create",
    "social_post_edit",
    "__end__",
]


# ===== 记录类型 =====

class SimplifiedMessage(BaseModel):
    user_message: str = Field(description="用户消息")
    ai_response: str = Field(description="AI 回复")


class PostContext(BaseModel):
    title: str = Field(default="", description="文章标题")
    summary: Optional[str] = Field(default=None, description="文章摘要")
    content: Optional[str] = Field(default=None, description="文章全文")


class CodeExample(BaseModel):
    language: str = Field(description="编程语言")
    code: str = Field(description="代码内容")
    description: Optional[str] = Field(default=None, description="代码说明")


class VisualElement(BaseModel):
    type: str = Field(description="视觉元素类型")
    description: str = Field(description="视觉元素的详细描述")
    content: str = Field(default="", description="视觉元素的文本或数据")
    style: str = Field(default="", description="风格偏好")


class StructuredPost(BaseModel):
    post_content: str = Field(min_length=1, description="社交帖子正文")
    code_examples: Optional[List[CodeExample]] = Field(default=None, description="代码片段")
    visual_elements: Optional[List[VisualElement]] = Field(default=None, description="视觉元素")


class SocialPostRecord(BaseModel):
    """会话中已生成的社交帖子（持久化记录）"""
    id: str = Field(description="唯一标识")
    session_id: str = Field(default="", description="会话 ID")
    user_id: str = Field(default="", description="用户 ID")
    post_id: Optional[str] = Field(default=None, description="来源文章 ID")
    platform: SocialPlatform = Field(description="平台")
    content: str = Field(description="帖子正文")
    code_examples: List[CodeExample] = Field(default_factory=list, description="代码片段")
    visual_elements: List[VisualElement] = Field(default_factory=list, description="视觉元素")
    created_at: datetime = Field(default_factory=datetime.now, description="创建时间")
    updated_at: Optional[datetime] = Field(default=None, description="更新时间")
    model_config = ConfigDict(use_enum_values=True)

    def to_snapshot(self) -> Dict[str, Any]:
        """转换为状态中使用的只读快照"""
        return {
            "id": self.id,
            "platform": self.platform,
            "content": self.content,
            "code_examples": [c.model_dump() for c in self.code_examples] or None,
        }


class SocialPostData(BaseModel):
    """创建/更新社交帖子时写入持久层的数据"""
    content: str
    platform: SocialPlatform
    code_examples: List[CodeExample] = Field(default_factory=list)
    visual_elements: List[VisualElement] = Field(default_factory=list)
    model_config = ConfigDict(use_enum_values=True)


# ===== 能力 Agent 输入 =====

class IntentInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    last_intent: Optional[str] = None


class SocialIntentInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)


class PlatformInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)


class SocialPostSnapshot(BaseModel):
    id: str
    platform: SocialPlatform
    content: str
    code_examples: Optional[List[CodeExample]] = None
    model_config = ConfigDict(use_enum_values=True)


class PostSelectorInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    social_posts_history: List[SocialPostSnapshot] = Field(min_length=1)


class PostCreateInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    post_content: str = Field(min_length=1)
    platform: SocialPlatform
    content_preferences: Optional[str] = None
    model_config = ConfigDict(use_enum_values=True)


class PostEditInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    target_post: SocialPostSnapshot
    post_content: Optional[str] = None
    content_preferences: Optional[str] = None


class PostQAInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    post_summary: str = ""
    post_content: str = ""


class SupportInput(BaseModel):
    message: str
    last_messages: List[SimplifiedMessage] = Field(default_factory=list, max_length=MAX_HISTORY_PAIRS)
    post_title: Optional[str] = None
    post_summary: Optional[str] = None


# ===== 能力 Agent 输出 =====

class IntentOutput(BaseModel):
    type: IntentType = Field(description="识别出的意图")
    confidence: float = Field(ge=0, le=1, description="置信度")
    reasoning: str = Field(description="分类理由")
    clarifying_question: Optional[str] = Field(default=None, description="意图不明确时的澄清问题")
    suggested_options: Optional[List[str]] = Field(default=None, max_length=3, description="建议选项")
    model_config = ConfigDict(use_enum_values=True)


class SocialIntentOutput(BaseModel):
    action: SocialAction = Field(description="创建新帖子或编辑已有帖子")
    confidence: float = Field(ge=0, le=1, description="置信度")
    reasoning: str = Field(description="分类理由")
    model_config = ConfigDict(use_enum_values=True)


class PlatformOutput(BaseModel):
    platform: Optional[SocialPlatform] = Field(default=None, description="识别出的平台，不明确时为空")
    confidence: float = Field(default=0.0, ge=0, le=1, description="置信度")
    needs_clarification: bool = Field(description="是否需要向用户澄清")
    message: Optional[str] = Field(default=None, description="确认或澄清消息")
    suggested_options: Optional[List[str]] = Field(default=None, description="平台选项")
    model_config = ConfigDict(use_enum_values=True)


class PostSelectorOutput(BaseModel):
    selected_post_id: Optional[str] = Field(default=None, description="选中的帖子 ID")
    confidence: float = Field(ge=0, le=1, description="置信度")
    reasoning: str = Field(description="选择理由")
    message: Optional[str] = Field(default=None, description="确认消息或选择提示")
    suggested_options: Optional[List[str]] = Field(default=None, description="候选帖子选项")


class PostGenerationOutput(BaseModel):
    message: str = Field(description="给用户的说明")
    structured_post: StructuredPost = Field(description="结构化帖子内容")
    suggested_options: Optional[List[str]] = Field(default=None, max_length=3, description="后续操作建议")


class ConversationalOutput(BaseModel):
    response: str = Field(min_length=1, description="回复内容")
    suggested_options: Optional[List[str]] = Field(default=None, max_length=3, description="后续问题建议")


# ===== 后处理结果 =====

class PostProcessorResult(BaseModel):
    social_post_id: Optional[str] = Field(default=None, description="持久化后的社交帖子 ID")
    response: str = Field(description="最终回复")
    suggested_options: List[str] = Field(default_factory=list, description="建议选项")
    is_social_post: bool = Field(default=False, description="是否为社交帖子结果")
    structured_post: Optional[Dict[str, Any]] = Field(default=None, description="结构化帖子内容")


# ===== 协议 =====

class EventSink(Protocol):
    """进度事件出口；实现可以是同步或异步的"""
    def emit(self, event: str, payload: Dict[str, Any]) -> Union[None, Awaitable[None]]: ...


class MemoryProvider(Protocol):
    async def load_recent_messages(self, session_id: str, limit: int = MAX_HISTORY_PAIRS) -> List[SimplifiedMessage]: ...
    async def load_session_posts(self, session_id: str) -> List[SocialPostRecord]: ...


class PersistenceProvider(Protocol):
    async def create_social_post(
        self, session_id: str, user_id: str, post_id: Optional[str], data: SocialPostData
    ) -> SocialPostRecord: ...
    async def update_social_post(
        self, session_id: str, social_post_id: str, user_id: str, data: SocialPostData
    ) -> SocialPostRecord: ...


NodeHandler = Callable[[Dict[str, Any], Any], Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]
RouterFunction = Callable[[Dict[str, Any]], str]
