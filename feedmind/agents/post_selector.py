"""
帖子选择 Agent
==============

从会话已有的社交帖子中判断用户想编辑哪一篇。
"""

from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from feedmind.agents.base import BaseAgent, history_to_messages, register_agent
from feedmind.config.prompts import PromptTemplates
from feedmind.types import PostSelectorInput, PostSelectorOutput, SocialPostSnapshot


def describe_post(index: int, post: SocialPostSnapshot) -> str:
    """帖子在提示词中的描述，代码片段也是帖子身份的一部分"""
    text = f"Post {index} [ID: {post.id}] ({post.platform}): {post.content}"
    if post.code_examples:
        lines = [
            f"  - Code ({example.language}): {example.description or example.code[:60]}"
            for example in post.code_examples
        ]
        text += "\n  Code examples:\n" + "\n".join(lines)
    return text


@register_agent("post_selector")
class PostSelectorAgent(BaseAgent):

    input_model = PostSelectorInput
    output_model = PostSelectorOutput

    @property
    def name(self) -> str:
        return "post_selector"

    @property
    def description(self) -> str:
        return "确定要编辑的社交帖子"

    def build_messages(self, request: PostSelectorInput) -> List[BaseMessage]:
        messages: List[BaseMessage] = [self.system_message()]
        messages.extend(history_to_messages(request.last_messages))

        posts = "\n\n".join(
            describe_post(i, post) for i, post in enumerate(request.social_posts_history, 1)
        )
        messages.append(AIMessage(content=PromptTemplates.get("POST_SELECTOR_POSTS", posts=posts)))
        messages.append(HumanMessage(content=request.message))
        return messages
