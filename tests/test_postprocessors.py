"""
后处理器测试
============

测试终态分类、恰好一个后处理器执行，以及新建/编辑/默认三种副作用。
"""

import itertools

import pytest

from feedmind.postprocessors import (
    BasePostProcessor,
    CreatePostProcessor,
    DefaultPostProcessor,
    EditPostProcessor,
    PostProcessorManager,
    PostProcessRequest,
    classify_result,
)
from feedmind.types import NoProcessorFoundError, PostProcessorResult, ResultKind

STRUCTURED = {
    "post_content": "AI is everywhere. #AI",
    "code_examples": [{"language": "python", "code": "print('hi')"}],
}


def create_state(**extra):
    state = {
        "response": "Here is your LinkedIn post",
        "suggested_options": ["Make it shorter"],
        "is_social_post": True,
        "structured_post": dict(STRUCTURED),
        "platform_result": {"platform": "linkedin"},
    }
    state.update(extra)
    return state


def edit_state(post, **extra):
    state = {
        "response": "Made it shorter",
        "is_social_post": True,
        "structured_post": dict(STRUCTURED),
        "editing_social_post_id": post.id,
        "social_posts_history": [post.to_snapshot()],
    }
    state.update(extra)
    return state


def request_for(state, **kwargs):
    return PostProcessRequest(result=state, session_id="s1", user_id="u1", **kwargs)


class EchoProcessor(BasePostProcessor):
    """处理所有带 response 的终态"""

    def can_handle(self, state):
        return bool(state.get("response"))

    async def process(self, request):
        return PostProcessorResult(response=f"echo: {request.result['response']}")


class TestClassification:
    """终态分类测试"""

    def test_create(self):
        assert classify_result(create_state()) == ResultKind.CREATE

    def test_edit(self, twitter_post):
        assert classify_result(edit_state(twitter_post)) == ResultKind.EDIT

    def test_edit_wins_over_platform(self, twitter_post):
        """测试同时有平台与编辑目标时按编辑处理"""
        state = edit_state(twitter_post, platform_result={"platform": "linkedin"})
        assert classify_result(state) == ResultKind.EDIT

    @pytest.mark.parametrize("state", [
        {},
        {"response": "hi", "is_social_post": False},
        create_state(is_social_post=False),
        create_state(structured_post=None),
        create_state(platform_result={"platform": None}),
    ])
    def test_passthrough(self, state):
        assert classify_result(state) == ResultKind.PASSTHROUGH

    def test_exactly_one_builtin_matches(self, post_store):
        """测试任意终态组合恰好匹配一个内置后处理器"""
        processors = [
            CreatePostProcessor(post_store),
            EditPostProcessor(post_store),
            DefaultPostProcessor(),
        ]
        for is_social, structured, platform, editing in itertools.product(
            [True, False, None], [STRUCTURED, None], ["twitter", None], ["p1", None]
        ):
            state = {
                "is_social_post": is_social,
                "structured_post": structured,
                "platform_result": {"platform": platform},
                "editing_social_post_id": editing,
            }
            matches = [p for p in processors if p.can_handle(state)]
            assert len(matches) == 1, state


class TestCreateProcessor:
    """新建帖子后处理器测试"""

    async def test_persists_new_post(self, post_store):
        processor = CreatePostProcessor(post_store)

        result = await processor.process(request_for(create_state(), post_id="article-1"))

        record = post_store.records[result.social_post_id]
        assert record.platform == "linkedin"
        assert record.content == STRUCTURED["post_content"]
        assert record.post_id == "article-1"
        assert record.code_examples[0].language == "python"
        assert result.is_social_post is True
        assert result.response == "Here is your LinkedIn post"
        assert result.suggested_options == ["Make it shorter"]
        assert result.structured_post["post_content"] == STRUCTURED["post_content"]


class TestEditProcessor:
    """编辑帖子后处理器测试"""

    async def test_updates_existing_post(self, post_store, twitter_post):
        post_store.add(twitter_post)
        processor = EditPostProcessor(post_store)

        result = await processor.process(request_for(edit_state(twitter_post)))

        assert result.social_post_id == "p1"
        assert post_store.records["p1"].content == STRUCTURED["post_content"]
        assert post_store.records["p1"].platform == "twitter"
        assert len(post_store.records) == 1
        assert post_store.writes == 1


class TestDefaultProcessor:
    """默认后处理器测试"""

    async def test_passthrough_has_no_side_effects(self, post_store):
        manager = PostProcessorManager(post_store)
        state = {"response": "The article covers AI trends.", "suggested_options": ["More?"], "is_social_post": False}

        first = await manager.process(request_for(state))
        second = await manager.process(request_for(state))

        assert first == second
        assert first.social_post_id is None
        assert first.response == "The article covers AI trends."
        assert post_store.writes == 0

    async def test_default_response(self, post_store, test_settings):
        test_settings.default_response = "Sorry, I did not get that."
        manager = PostProcessorManager(post_store, test_settings)

        result = await manager.process(request_for({}))

        assert result.response == "Sorry, I did not get that."
        assert result.suggested_options == []


class TestPostProcessorManager:
    """后处理器管理器测试"""

    async def test_dispatch_by_kind(self, post_store, twitter_post):
        post_store.add(twitter_post)
        manager = PostProcessorManager(post_store)

        assert isinstance(manager.select(request_for(create_state())), CreatePostProcessor)
        assert isinstance(manager.select(request_for(edit_state(twitter_post))), EditPostProcessor)
        assert isinstance(manager.select(request_for({"response": "hi"})), DefaultPostProcessor)

    async def test_custom_processor_checked_first(self, post_store):
        """测试自定义后处理器优先于内置后处理器"""
        manager = PostProcessorManager(post_store)
        manager.register_processor(EchoProcessor())

        result = await manager.process(request_for(create_state()))

        assert result.response == "echo: Here is your LinkedIn post"
        assert post_store.writes == 0
        assert isinstance(manager.processors[0], EchoProcessor)

    async def test_custom_position(self, post_store):
        manager = PostProcessorManager(post_store)
        first, second = EchoProcessor(), EchoProcessor()
        manager.register_processor(first)
        manager.register_processor(second, position=0)

        assert manager.processors[:2] == [second, first]

    async def test_no_processor(self, post_store):
        manager = PostProcessorManager(post_store)
        manager._builtin.clear()

        with pytest.raises(NoProcessorFoundError):
            await manager.process(request_for({"response": "hi"}))
