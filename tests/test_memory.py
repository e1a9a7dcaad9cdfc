"""
记忆模块测试
============

测试会话问答窗口、LRU 淘汰以及社交帖子的文件持久化。
"""

import json

import pytest

from feedmind.memory import ConversationMemory, SocialPostStore
from feedmind.types import MAX_HISTORY_PAIRS, SocialPostData, SocialPostNotFoundError


def post_data(content="AI agents are here. #AI", platform="twitter"):
    return SocialPostData(content=content, platform=platform)


class TestConversationMemory:
    """对话记忆测试"""

    async def test_append_and_load(self):
        memory = ConversationMemory()
        memory.append_exchange("s1", "Hi", "Hello!")
        memory.append_exchange("s1", "What is this?", "An article about AI.")

        messages = await memory.load_recent_messages("s1")

        assert [m.user_message for m in messages] == ["Hi", "What is this?"]
        assert messages[-1].ai_response == "An article about AI."

    async def test_window_keeps_latest(self):
        """测试只保留最近的 MAX_HISTORY_PAIRS 对"""
        memory = ConversationMemory()
        for i in range(MAX_HISTORY_PAIRS + 5):
            memory.append_exchange("s1", f"q{i}", f"a{i}")

        messages = await memory.load_recent_messages("s1")

        assert len(messages) == MAX_HISTORY_PAIRS
        assert messages[0].user_message == "q5"
        assert messages[-1].user_message == f"q{MAX_HISTORY_PAIRS + 4}"

    async def test_window_cannot_exceed_limit(self):
        memory = ConversationMemory(window=50)
        assert memory.window == MAX_HISTORY_PAIRS

    def test_get_recent_limit(self):
        memory = ConversationMemory()
        for i in range(5):
            memory.append_exchange("s1", f"q{i}", f"a{i}")

        assert [m.user_message for m in memory.get_recent("s1", 2)] == ["q3", "q4"]
        assert memory.get_recent("s1", 0) == []
        assert memory.get_recent("unknown") == []

    def test_sessions_are_isolated(self):
        memory = ConversationMemory()
        memory.append_exchange("s1", "a", "b")

        assert memory.get_recent("s2") == []

    def test_lru_eviction(self):
        """测试超过最大会话数时淘汰最久未访问的会话"""
        memory = ConversationMemory(max_sessions=2)
        memory.append_exchange("s1", "a", "b")
        memory.append_exchange("s2", "a", "b")
        memory.append_exchange("s1", "c", "d")
        memory.append_exchange("s3", "a", "b")

        assert memory.size() == 2
        assert memory.get_recent("s2") == []
        assert len(memory.get_recent("s1")) == 2

    def test_last_intent(self):
        memory = ConversationMemory()

        assert memory.get_last_intent("s1") is None
        memory.set_last_intent("s1", "ASK_POST")
        assert memory.get_last_intent("s1") == "ASK_POST"

    def test_clear(self):
        memory = ConversationMemory()
        memory.append_exchange("s1", "a", "b")
        memory.append_exchange("s2", "a", "b")

        assert memory.clear_session("s1") is True
        assert memory.clear_session("s1") is False
        memory.clear()
        assert memory.size() == 0

    def test_session_bounded_by_window(self):
        """测试长会话中问答与帖子 ID 都不超过窗口大小"""
        memory = ConversationMemory(window=MAX_HISTORY_PAIRS)
        for i in range(50):
            memory.append_exchange("s1", f"q{i}", f"a{i}", f"p{i}" if i % 2 else None)

        history = memory.get_recent("s1")
        post_ids = memory.get_recent_social_post_ids("s1")

        assert len(history) == MAX_HISTORY_PAIRS
        assert len(post_ids) == MAX_HISTORY_PAIRS
        assert history[-1].user_message == "q49"
        assert post_ids[-1] == "p49"
        assert post_ids[-2] is None

    def test_stats(self):
        memory = ConversationMemory(max_sessions=5)
        memory.append_exchange("s1", "a", "b")
        memory.append_exchange("s2", "a", "b")

        stats = memory.get_stats()

        assert stats["sessions"] == 2
        assert stats["total_messages"] == 2
        assert stats["oldest_session"] == "s1"
        assert stats["newest_session"] == "s2"

    async def test_load_session_posts(self, memory, post_store, twitter_post, linkedin_post):
        post_store.add(twitter_post)
        post_store.add(linkedin_post.model_copy(update={"session_id": "other"}))

        posts = await memory.load_session_posts("s1")

        assert [p.id for p in posts] == ["p1"]

    async def test_load_session_posts_without_store(self):
        assert await ConversationMemory().load_session_posts("s1") == []


class TestSocialPostStore:
    """社交帖子存储测试"""

    @pytest.fixture
    def store(self, tmp_path):
        return SocialPostStore(str(tmp_path / "posts" / "social_posts.json"))

    async def test_create(self, store):
        record = await store.create_social_post("s1", "u1", "article-1", post_data())

        assert record.id
        assert record.platform == "twitter"
        assert record.post_id == "article-1"
        assert store.get(record.id) == record
        assert store.size() == 1

    async def test_persisted_to_disk(self, store, tmp_path):
        """测试写入后可被新实例重新加载"""
        record = await store.create_social_post("s1", "u1", None, post_data())

        raw = json.loads(store.storage_path.read_text(encoding="utf-8"))
        reloaded = SocialPostStore(str(store.storage_path))

        assert record.id in raw
        assert reloaded.get(record.id).content == record.content
        assert not store.storage_path.with_suffix(".json.tmp").exists()

    async def test_update(self, store):
        record = await store.create_social_post("s1", "u1", None, post_data())

        updated = await store.update_social_post("s1", record.id, "u1", post_data("Shorter. #AI"))

        assert updated.id == record.id
        assert updated.content == "Shorter. #AI"
        assert updated.created_at == record.created_at
        assert updated.updated_at is not None
        assert store.size() == 1

    async def test_update_missing(self, store):
        with pytest.raises(SocialPostNotFoundError) as exc_info:
            await store.update_social_post("s1", "nope", "u1", post_data())
        assert exc_info.value.social_post_id == "nope"

    async def test_update_other_session(self, store):
        """测试不能更新其他会话的帖子"""
        record = await store.create_social_post("s1", "u1", None, post_data())

        with pytest.raises(SocialPostNotFoundError):
            await store.update_social_post("s2", record.id, "u1", post_data("hijack"))
        assert store.get(record.id).content == "AI agents are here. #AI"

    async def test_list_session_posts(self, store):
        first = store.create("s1", "u1", None, post_data("one"))
        second = store.create("s1", "u1", None, post_data("two", "linkedin"))
        store.create("s2", "u1", None, post_data("other"))

        posts = await store.load_session_posts("s1")

        assert [p.id for p in posts] == [first.id, second.id]

    def test_delete(self, store):
        record = store.create("s1", "u1", None, post_data())

        assert store.delete(record.id) is True
        assert store.delete(record.id) is False
        assert store.size() == 0

    def test_default_path_from_settings(self, tmp_path):
        store = SocialPostStore()
        assert store.storage_path == (tmp_path / "social_posts.json").resolve()
