"""
平台识别 Agent
==============

只根据用户的明确提及识别目标社交平台，无法确定时返回澄清问题。
"""

from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, register_agent
from feedmind.types import PlatformInput, PlatformOutput, SocialPlatform


@register_agent("platform")
class PlatformAgent(BaseAgent):
    """
    平台识别智能体

    只把用户说过的话作为上下文，AI 回复不参与平台判断。
    """

    input_model = PlatformInput
    output_model = PlatformOutput

    @property
    def name(self) -> str:
        return "platform"

    @property
    def description(self) -> str:
        return "识别社交帖子的目标平台"

    def build_messages(self, request: PlatformInput) -> List[BaseMessage]:
        platforms = ", ".join(p.value for p in SocialPlatform)
        messages: List[BaseMessage] = [self.system_message(platforms=platforms)]

        if request.last_messages:
            messages.append(AIMessage(content="Previous conversation messages for context:"))
            for pair in request.last_messages:
                messages.append(HumanMessage(content=pair.user_message))

        messages.append(AIMessage(content="I have the context and will detect the platform."))
        messages.append(HumanMessage(content=request.message))
        return messages
