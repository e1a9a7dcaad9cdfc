"""
短期记忆模块
============

实现会话内的对话记忆：每个会话保存最近的若干对问答和上一轮意图，
作为对话图的 Memory provider 使用。
"""

import threading
from collections import OrderedDict, deque
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

from feedmind.types import MAX_HISTORY_PAIRS, SimplifiedMessage, SocialPostRecord
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


class SessionMemory:
    """单个会话的记忆"""

    def __init__(self, session_id: str, window: int):
        self.session_id = session_id
        self.messages: Deque[SimplifiedMessage] = deque(maxlen=window)
        self.social_post_ids: Deque[Optional[str]] = deque(maxlen=window)
        self.last_intent: Optional[str] = None
        self.created_at = datetime.now()
        self.accessed_at = datetime.now()

    def touch(self) -> None:
        self.accessed_at = datetime.now()


class ConversationMemory:
    """
    对话记忆

    基于 LRU（最近最少使用）策略的内存存储，超过最大会话数时
    自动淘汰最久未访问的会话。每个会话只保留最近 window 对问答。

    特性：
    - 线程安全
    - LRU 淘汰策略
    - 可选地从 SocialPostStore 读取会话帖子

    使用示例：
        >>> memory = ConversationMemory(max_sessions=100)
        >>> memory.append_exchange("s1", "Hi", "Hello!")
        >>> await memory.load_recent_messages("s1")
    """

    def __init__(
        self,
        max_sessions: int = 1000,
        window: int = MAX_HISTORY_PAIRS,
        post_store: Optional[Any] = None,
    ):
        """
        初始化对话记忆

        Args:
            max_sessions: 最大会话数
            window: 每个会话保留的问答对数，不超过 MAX_HISTORY_PAIRS
            post_store: 社交帖子存储，提供 list_session_posts(session_id)
        """
        self.max_sessions = max_sessions
        self.window = min(window, MAX_HISTORY_PAIRS)
        self.post_store = post_store
        self._sessions: "OrderedDict[str, SessionMemory]" = OrderedDict()
        self._lock = threading.RLock()
        self.logger = get_logger(self.__class__.__name__)

        self.logger.debug(f"初始化对话记忆，最大会话数: {max_sessions}，窗口: {self.window}")

    def _session(self, session_id: str) -> SessionMemory:
        session = self._sessions.get(session_id)
        if session is None:
            while len(self._sessions) >= self.max_sessions:
                oldest, _ = self._sessions.popitem(last=False)
                self.logger.debug(f"淘汰会话: {oldest}")
            session = SessionMemory(session_id, self.window)
            self._sessions[session_id] = session
        else:
            self._sessions.move_to_end(session_id)
        session.touch()
        return session

    def append_exchange(
        self,
        session_id: str,
        user_message: str,
        ai_response: str,
        social_post_id: Optional[str] = None,
    ) -> None:
        """
        记录一轮问答

        Args:
            session_id: 会话 ID
            user_message: 用户消息
            ai_response: AI 回复
            social_post_id: 本轮产生或更新的社交帖子 ID
        """
        with self._lock:
            session = self._session(session_id)
            session.messages.append(SimplifiedMessage(user_message=user_message, ai_response=ai_response))
            session.social_post_ids.append(social_post_id)
            self.logger.debug(f"会话 {session_id} 记录问答，当前 {len(session.messages)} 对")

    def set_last_intent(self, session_id: str, intent: Optional[str]) -> None:
        with self._lock:
            self._session(session_id).last_intent = intent

    def get_last_intent(self, session_id: str) -> Optional[str]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.last_intent if session else None

    def get_recent(self, session_id: str, limit: int = MAX_HISTORY_PAIRS) -> List[SimplifiedMessage]:
        """
        获取最近的问答

        Args:
            session_id: 会话 ID
            limit: 最多返回的对数

        Returns:
            按时间顺序排列的问答列表
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or limit <= 0:
                return []
            session.touch()
            return list(session.messages)[-limit:]

    def get_recent_social_post_ids(self, session_id: str) -> List[Optional[str]]:
        """与 get_recent 对齐的社交帖子 ID，没有产生帖子的轮次为 None"""
        with self._lock:
            session = self._sessions.get(session_id)
            return list(session.social_post_ids) if session else []

    # ===== Memory provider 接口 =====

    async def load_recent_messages(self, session_id: str, limit: int = MAX_HISTORY_PAIRS) -> List[SimplifiedMessage]:
        return self.get_recent(session_id, min(limit, self.window))

    async def load_session_posts(self, session_id: str) -> List[SocialPostRecord]:
        if self.post_store is None:
            return []
        return self.post_store.list_session_posts(session_id)

    # ===== 管理 =====

    def clear_session(self, session_id: str) -> bool:
        with self._lock:
            if session_id in self._sessions:
                del self._sessions[session_id]
                self.logger.debug(f"清空会话: {session_id}")
                return True
            return False

    def clear(self) -> None:
        """清空所有会话"""
        with self._lock:
            self._sessions.clear()
            self.logger.info("清空对话记忆")

    def size(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_stats(self) -> Dict[str, Any]:
        """
        获取记忆统计信息

        Returns:
            统计信息字典
        """
        with self._lock:
            return {
                "sessions": len(self._sessions),
                "max_sessions": self.max_sessions,
                "window": self.window,
                "total_messages": sum(len(s.messages) for s in self._sessions.values()),
                "oldest_session": next(iter(self._sessions), None),
                "newest_session": next(reversed(self._sessions), None) if self._sessions else None,
            }
