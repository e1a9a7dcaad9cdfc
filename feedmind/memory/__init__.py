"""
记忆模块
========

- ConversationMemory: 会话内的最近问答（Memory provider）
- SocialPostStore: 社交帖子的文件持久化（Persistence provider）
"""

from feedmind.memory.short_term import ConversationMemory, SessionMemory
from feedmind.memory.long_term import SocialPostStore

__all__ = [
    "ConversationMemory",
    "SessionMemory",
    "SocialPostStore",
]
