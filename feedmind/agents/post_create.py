"""
社交帖子生成 Agent
==================

根据文章内容、目标平台和用户偏好生成结构化社交帖子。
"""

from typing import List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from feedmind.agents.base import BaseAgent, history_to_messages, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import PostCreateInput, PostGenerationOutput


@register_agent("post_create")
class PostCreateAgent(BaseAgent):
    """
    社交帖子生成智能体

    消息顺序：
    1. 系统指令
    2. 上下文块（目标平台、用户偏好、文章全文）
    3. 最近对话，用于突出用户感兴趣的要点
    4. 生成指令
    """

    input_model = PostCreateInput
    output_model = PostGenerationOutput

    @property
    def name(self) -> str:
        return "post_create"

    @property
    def description(self) -> str:
        return "从文章生成平台定制的社交帖子"

    def build_messages(self, request: PostCreateInput) -> List[BaseMessage]:
        platform = str(request.platform)
        preferences = ""
        if request.content_preferences and request.content_preferences.strip():
            preferences = f'User Content Preferences: "{request.content_preferences.strip()}"\n'

        messages: List[BaseMessage] = [self.system_message()]
        messages.append(HumanMessage(content=PromptTemplates.get(
            "POST_CREATE_CONTEXT",
            platform=platform.upper(),
            preferences=preferences,
            post_content=request.post_content,
        )))

        if request.last_messages:
            messages.append(SystemMessage(
                content="Below is the recent Q&A history. Use it to identify which points interested the user."
            ))
            messages.extend(history_to_messages(request.last_messages))

        messages.append(HumanMessage(content=PromptTemplates.get(
            "POST_CREATE_TRIGGER", platform=platform, message=request.message,
        )))
        return messages
