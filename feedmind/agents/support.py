"""
通用支持 Agent
==============

处理问候、闲聊和“你能做什么”之类的通用请求。
"""

from typing import List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from feedmind.agents.base import BaseAgent, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import ConversationalOutput, SupportInput


@register_agent("support")
class SupportAgent(BaseAgent):
    """
    通用支持智能体

    只使用用户此前说过的话构建上下文；首轮对话时提示模型先做欢迎。
    """

    input_model = SupportInput
    output_model = ConversationalOutput

    @property
    def name(self) -> str:
        return "support"

    @property
    def description(self) -> str:
        return "通用对话与功能引导"

    def build_messages(self, request: SupportInput) -> List[BaseMessage]:
        system_prompt = self.get_system_prompt()
        if request.post_title or request.post_summary:
            system_prompt += "\n\n" + PromptTemplates.get(
                "SUPPORT_CONTEXT",
                post_title=request.post_title or "Not provided",
                post_summary=request.post_summary or "Not provided",
            )

        if request.last_messages:
            previous = " -> ".join(pair.user_message for pair in request.last_messages)
            conversation = f"Previous user messages: {previous}\nBuild on their interests and avoid repetition."
        else:
            conversation = "This is the user's first interaction. Welcome them and explain what you can help with."

        return [
            SystemMessage(content=system_prompt),
            HumanMessage(content=f'{conversation}\n\nCurrent message: "{request.message}"'),
        ]

