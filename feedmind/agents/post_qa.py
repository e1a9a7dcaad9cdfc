"""
文章问答 Agent
==============

基于当前文章的摘要与全文回答用户问题。
"""

from typing import List

from langchain_core.messages import BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, history_to_messages, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import ConversationalOutput, PostQAInput


@register_agent("post_qa")
class PostQAAgent(BaseAgent):

    input_model = PostQAInput
    output_model = ConversationalOutput

    @property
    def name(self) -> str:
        return "post_qa"

    @property
    def description(self) -> str:
        return "回答关于当前文章的问题"

    def build_messages(self, request: PostQAInput) -> List[BaseMessage]:
        messages: List[BaseMessage] = [self.system_message()]
        messages.append(HumanMessage(content=PromptTemplates.get(
            "POST_QA_CONTEXT",
            post_summary=request.post_summary or "Not provided",
            post_content=request.post_content or "Not provided",
        )))
        messages.extend(history_to_messages(request.last_messages))
        messages.append(HumanMessage(content=request.message))
        return messages
