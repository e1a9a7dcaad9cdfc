"""
社交意图 Agent
==============

判断用户想新建社交帖子（CREATE）还是修改已有帖子（EDIT）。
"""

from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, history_to_messages, register_agent
from feedmind.types import SocialIntentInput, SocialIntentOutput


@register_agent("social_intent")
class SocialIntentAgent(BaseAgent):

    input_model = SocialIntentInput
    output_model = SocialIntentOutput

    @property
    def name(self) -> str:
        return "social_intent"

    @property
    def description(self) -> str:
        return "区分新建与编辑社交帖子"

    def build_messages(self, request: SocialIntentInput) -> List[BaseMessage]:
        messages: List[BaseMessage] = [self.system_message()]
        messages.extend(history_to_messages(request.last_messages))
        messages.append(AIMessage(content="I will use prior messages for context and continuity."))
        messages.append(HumanMessage(content=request.message))
        return messages
