"""
长期记忆模块
============

社交帖子的持久化存储，作为后处理器的 Persistence provider 使用。

所有帖子保存在一个 JSON 文件中，每次写入先写临时文件再原子替换。
"""

import asyncio
import json
import os
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from feedmind.config.settings import get_settings
from feedmind.types import SocialPostData, SocialPostNotFoundError, SocialPostRecord
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


class SocialPostStore:
    """
    社交帖子存储

    特性：
    - 持久化存储
    - 线程安全
    - 原子写入

    存储结构：
        data/social_posts.json
        {
            "<id>": {"id": ..., "session_id": ..., "platform": ..., "content": ..., ...},
            ...
        }

    使用示例：
        >>> store = SocialPostStore("data/social_posts.json")
        >>> record = await store.create_social_post("s1", "u1", None, data)
        >>> store.list_session_posts("s1")
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        初始化帖子存储

        Args:
            storage_path: 存储文件路径，None 使用配置中的 SOCIAL_POSTS_PATH
        """
        settings = get_settings()
        self.storage_path = Path(storage_path or settings.social_posts_path).resolve()
        self._records: Dict[str, SocialPostRecord] = {}
        self._lock = threading.RLock()
        self.logger = get_logger(self.__class__.__name__)

        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._load()

        self.logger.info(f"初始化社交帖子存储，路径: {self.storage_path}，共 {len(self._records)} 条")

    def _load(self) -> None:
        if not self.storage_path.exists():
            self._records = {}
            return

        with open(self.storage_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        self._records = {key: SocialPostRecord.model_validate(value) for key, value in raw.items()}
        self.logger.debug(f"加载帖子 {len(self._records)} 条")

    def _save(self) -> None:
        data = {key: record.model_dump(mode="json") for key, record in self._records.items()}
        tmp_path = self.storage_path.with_suffix(self.storage_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.storage_path)

    # ===== 同步接口 =====

    def create(
        self,
        session_id: str,
        user_id: str,
        post_id: Optional[str],
        data: SocialPostData,
    ) -> SocialPostRecord:
        """
        新建帖子

        Args:
            session_id: 会话 ID
            user_id: 用户 ID
            post_id: 来源文章 ID
            data: 帖子内容

        Returns:
            新建的帖子记录
        """
        with self._lock:
            record = SocialPostRecord(
                id=uuid.uuid4().hex[:12],
                session_id=session_id,
                user_id=user_id,
                post_id=post_id,
                **data.model_dump(),
            )
            self._records[record.id] = record
            self._save()
            self.logger.debug(f"新建帖子: {record.id}")
            return record

    def update(
        self,
        session_id: str,
        social_post_id: str,
        user_id: str,
        data: SocialPostData,
    ) -> SocialPostRecord:
        """
        更新帖子内容

        Raises:
            SocialPostNotFoundError: 帖子不存在或不属于该会话
        """
        with self._lock:
            existing = self._records.get(social_post_id)
            if existing is None or existing.session_id != session_id:
                raise SocialPostNotFoundError(social_post_id, session_id)

            record = SocialPostRecord.model_validate({
                **existing.model_dump(),
                **data.model_dump(),
                "user_id": user_id or existing.user_id,
                "updated_at": datetime.now(),
            })
            self._records[social_post_id] = record
            self._save()
            self.logger.debug(f"更新帖子: {social_post_id}")
            return record

    def get(self, social_post_id: str) -> Optional[SocialPostRecord]:
        with self._lock:
            return self._records.get(social_post_id)

    def list_session_posts(self, session_id: str) -> List[SocialPostRecord]:
        """按创建时间列出会话中的帖子"""
        with self._lock:
            posts = [r for r in self._records.values() if r.session_id == session_id]
        return sorted(posts, key=lambda r: r.created_at)

    def delete(self, social_post_id: str) -> bool:
        with self._lock:
            if social_post_id not in self._records:
                return False
            del self._records[social_post_id]
            self._save()
            return True

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    # ===== Persistence provider 接口 =====

    async def create_social_post(
        self,
        session_id: str,
        user_id: str,
        post_id: Optional[str],
        data: SocialPostData,
    ) -> SocialPostRecord:
        return await asyncio.to_thread(self.create, session_id, user_id, post_id, data)

    async def update_social_post(
        self,
        session_id: str,
        social_post_id: str,
        user_id: str,
        data: SocialPostData,
    ) -> SocialPostRecord:
        return await asyncio.to_thread(self.update, session_id, social_post_id, user_id, data)

    async def load_session_posts(self, session_id: str) -> List[SocialPostRecord]:
        return self.list_session_posts(session_id)
