"""
服务模块
========
"""

from feedmind.services.chat_turn import APOLOGY, ChatTurnService, ConversationStore

__all__ = [
    "APOLOGY",
    "ChatTurnService",
    "ConversationStore",
]
