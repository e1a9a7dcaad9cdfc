"""
社交帖子编辑 Agent
==================

只按用户要求修改已有帖子，其余内容保持不变。
"""

from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import PostEditInput, PostGenerationOutput

# 编辑后仍需满足的平台约束
PLATFORM_RULES = {
    "twitter": (280, "Must stay under 280 characters, maintain 1-3 relevant hashtags"),
    "linkedin": (3000, "Aim for 1300-1600 characters, maintain 3-5 hashtags"),
    "facebook": (2000, "Keep it conversational, 1-3 short paragraphs"),
    "instagram": (2200, "Caption style with line breaks, up to 10 hashtags"),
}


@register_agent("post_edit")
class PostEditAgent(BaseAgent):

    input_model = PostEditInput
    output_model = PostGenerationOutput

    @property
    def name(self) -> str:
        return "post_edit"

    @property
    def description(self) -> str:
        return "按用户要求编辑已有社交帖子"

    def build_messages(self, request: PostEditInput) -> List[BaseMessage]:
        target = request.target_post
        platform = str(target.platform).lower()

        messages: List[BaseMessage] = [self.system_message()]

        if platform in PLATFORM_RULES:
            max_length, guidelines = PLATFORM_RULES[platform]
            messages.append(AIMessage(
                content=f"Platform: {platform.upper()}\nMax Length: {max_length} characters\nGuidelines: {guidelines}"
            ))

        if request.content_preferences and request.content_preferences.strip():
            messages.append(AIMessage(content="User content preferences:"))
            messages.append(HumanMessage(content=request.content_preferences.strip()))

        messages.append(HumanMessage(content=PromptTemplates.get(
            "POST_EDIT_TARGET", platform=platform, post_id=target.id, content=target.content,
        )))

        if request.post_content and request.post_content.strip():
            messages.append(AIMessage(content="Original article content (use it if the user wants to add information from the source):"))
            messages.append(HumanMessage(content=request.post_content))

        if request.last_messages:
            messages.append(AIMessage(content="Conversation context:"))
            for pair in request.last_messages:
                messages.append(HumanMessage(content=f"User: {pair.user_message}"))
                messages.append(AIMessage(content=f"AI: {pair.ai_response}"))

        messages.append(AIMessage(content="I have the post and will apply ONLY the requested changes."))
        messages.append(HumanMessage(content=request.message))
        return messages
