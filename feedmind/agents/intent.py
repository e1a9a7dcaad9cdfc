"""
意图识别 Agent
==============

把用户消息分类为 GENERAL / ASK_POST / REQ_SOCIAL_POST / EDIT_SOCIAL_POST / CLARIFY_INTENT。
"""

from typing import List

from langchain_core.messages import BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, history_to_messages, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import IntentInput, IntentOutput


@register_agent("intent")
class IntentAgent(BaseAgent):
    """意图识别智能体，结合最近对话与上一轮意图保持连续性"""

    input_model = IntentInput
    output_model = IntentOutput

    @property
    def name(self) -> str:
        return "intent"

    @property
    def description(self) -> str:
        return "识别用户本轮消息的意图"

    def build_messages(self, request: IntentInput) -> List[BaseMessage]:
        messages: List[BaseMessage] = [self.system_message()]
        messages.extend(history_to_messages(request.last_messages))
        messages.append(HumanMessage(content=PromptTemplates.get(
            "INTENT_USER",
            last_intent=request.last_intent or "none",
            message=request.message,
        )))
        return messages
