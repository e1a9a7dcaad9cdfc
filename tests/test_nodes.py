"""
节点测试
========

直接调用各节点函数，验证它们写入的字段、可恢复的缺口处理以及 Agent 调用。
"""

from conftest import ScriptedAgent, intent_output, make_history
from feedmind.graph import ConversationNodes, create_initial_state
from feedmind.graph.nodes import (
    NO_CONTENT_RESPONSE,
    NO_PLATFORM_RESPONSE,
    NO_POSTS_RESPONSE,
    POST_NOT_FOUND_RESPONSE,
)
from feedmind.types import (
    MAX_HISTORY_PAIRS,
    PlatformOutput,
    PostSelectorOutput,
    SocialIntentOutput,
)


def state_for(message, article=None, posts=None, **extra):
    state = create_initial_state(
        message=message,
        session_id="s1",
        user_id="u1",
        post=article,
        social_posts_history=posts,
    )
    state.update(extra)
    return state


class TestDetectIntent:
    """意图识别节点测试"""

    async def test_writes_intent_result(self, make_agents, test_settings, context):
        nodes = ConversationNodes(make_agents(intent=ScriptedAgent("intent", intent_output("ASK_POST"))), test_settings)

        update = await nodes.detect_intent(state_for("What is this about?", last_intent="GENERAL"), context)

        assert update["intent_result"]["type"] == "ASK_POST"
        assert "response" not in update
        assert nodes.agents.intent.last_call.last_intent == "GENERAL"

    async def test_clarify_intent(self, make_agents, test_settings, context, recording_sink):
        """测试需要澄清时写入澄清问题"""
        agent = ScriptedAgent("intent", intent_output(
            "CLARIFY_INTENT",
            confidence=0.4,
            clarifying_question="Do you want a summary or a post?",
            suggested_options=["Summary", "Social post"],
        ))
        nodes = ConversationNodes(make_agents(intent=agent), test_settings)

        update = await nodes.detect_intent(state_for("hmm"), context)

        assert update["response"] == "Do you want a summary or a post?"
        assert update["suggested_options"] == ["Summary", "Social post"]
        assert update["is_social_post"] is False
        assert recording_sink.tokens() == ["Detecting your intent..."]


class TestSocialIntent:
    """社交意图节点测试"""

    async def test_forces_create_without_posts(self, make_agents, test_settings, context):
        """测试会话中没有帖子时不调用 Agent"""
        agent = ScriptedAgent("social_intent", SocialIntentOutput(action="EDIT", confidence=0.9, reasoning="x"))
        nodes = ConversationNodes(make_agents(social_intent=agent), test_settings)

        update = await nodes.social_intent(state_for("make it shorter"), context)

        assert update == {"social_intent_result": "CREATE"}
        assert not agent.called

    async def test_uses_agent_with_posts(self, make_agents, test_settings, context, twitter_post):
        agent = ScriptedAgent("social_intent", SocialIntentOutput(action="EDIT", confidence=0.9, reasoning="x"))
        nodes = ConversationNodes(make_agents(social_intent=agent), test_settings)

        update = await nodes.social_intent(state_for("make it shorter", posts=[twitter_post]), context)

        assert update == {"social_intent_result": "EDIT"}
        assert agent.called


class TestPlatformDetection:
    """平台识别节点测试"""

    async def test_detected(self, make_agents, test_settings, context):
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.social_platform_detection(state_for("LinkedIn post please"), context)

        assert update["platform_result"]["platform"] == "linkedin"
        assert update["platform_result"]["needs_clarification"] is False
        assert "response" not in update

    async def test_needs_clarification(self, make_agents, test_settings, context):
        """测试需要澄清时写入回复与选项"""
        agent = ScriptedAgent("platform", PlatformOutput(
            platform=None,
            needs_clarification=True,
            message="Which platform should I write for?",
            suggested_options=["Twitter", "LinkedIn"],
        ))
        nodes = ConversationNodes(make_agents(platform=agent), test_settings)

        update = await nodes.social_platform_detection(state_for("make a post"), context)

        assert update["platform_result"]["clarification_message"] == "Which platform should I write for?"
        assert update["response"] == "Which platform should I write for?"
        assert update["suggested_options"] == ["Twitter", "LinkedIn"]
        assert update["is_social_post"] is False


class TestPostCreate:
    """帖子生成节点测试"""

    async def test_success(self, make_agents, test_settings, context, article):
        nodes = ConversationNodes(make_agents(), test_settings)
        state = state_for("Create a LinkedIn post", article, platform_result={"platform": "linkedin"})
        state["social_media_content_preferences"] = "no emojis"

        update = await nodes.social_post_create(state, context)

        assert update["is_social_post"] is True
        assert update["structured_post"]["post_content"]
        call = nodes.agents.post_create.last_call
        assert call.platform == "linkedin"
        assert call.post_content == article.content
        assert call.content_preferences == "no emojis"

    async def test_keeps_clarification(self, make_agents, test_settings, context, article):
        """测试平台未确定时保留澄清回复"""
        nodes = ConversationNodes(make_agents(), test_settings)
        state = state_for("make a post", article, platform_result={
            "platform": None, "needs_clarification": True, "clarification_message": "Which platform?",
        })

        update = await nodes.social_post_create(state, context)

        assert update == {"is_social_post": False, "error": "No platform detected"}
        assert not nodes.agents.post_create.called

    async def test_no_platform(self, make_agents, test_settings, context, article):
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.social_post_create(state_for("post", article, platform_result={"platform": None}), context)

        assert update["response"] == NO_PLATFORM_RESPONSE
        assert update["suggested_options"] == ["Twitter", "LinkedIn"]
        assert update["error"]

    async def test_no_content(self, make_agents, test_settings, context):
        """测试没有文章内容时返回可恢复的错误"""
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.social_post_create(state_for("post", platform_result={"platform": "twitter"}), context)

        assert update["response"] == NO_CONTENT_RESPONSE
        assert update["is_social_post"] is False
        assert update["error"]
        assert not nodes.agents.post_create.called


class TestPostSelector:
    """帖子选择节点测试"""

    async def test_no_posts(self, make_agents, test_settings, context):
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.social_post_selector(state_for("edit my post"), context)

        assert update["response"] == NO_POSTS_RESPONSE
        assert update["is_social_post"] is False
        assert not nodes.agents.post_selector.called

    async def test_auto_select_single(self, make_agents, test_settings, context, twitter_post):
        """测试只有一篇帖子时自动选择"""
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.social_post_selector(state_for("shorter", posts=[twitter_post]), context)

        assert update == {"editing_social_post_id": "p1"}
        assert not nodes.agents.post_selector.called

    async def test_auto_select_disabled(self, make_agents, test_settings, context, twitter_post):
        test_settings.auto_select_single_post = False
        agent = ScriptedAgent("post_selector", PostSelectorOutput(selected_post_id="p1", confidence=0.9, reasoning="x"))
        nodes = ConversationNodes(make_agents(post_selector=agent), test_settings)

        update = await nodes.social_post_selector(state_for("shorter", posts=[twitter_post]), context)

        assert update == {"editing_social_post_id": "p1"}
        assert agent.called

    async def test_agent_selection(self, make_agents, test_settings, context, twitter_post, linkedin_post):
        agent = ScriptedAgent("post_selector", PostSelectorOutput(selected_post_id="p2", confidence=0.9, reasoning="x"))
        nodes = ConversationNodes(make_agents(post_selector=agent), test_settings)

        update = await nodes.social_post_selector(
            state_for("edit the linkedin one", posts=[twitter_post, linkedin_post]), context
        )

        assert update == {"editing_social_post_id": "p2"}
        assert [p.id for p in agent.last_call.social_posts_history] == ["p1", "p2"]

    async def test_unknown_selection(self, make_agents, test_settings, context, twitter_post, linkedin_post):
        """测试 Agent 返回不存在的 ID 时给出可恢复的回复"""
        agent = ScriptedAgent("post_selector", PostSelectorOutput(selected_post_id="p9", confidence=0.9, reasoning="x"))
        nodes = ConversationNodes(make_agents(post_selector=agent), test_settings)

        update = await nodes.social_post_selector(state_for("edit", posts=[twitter_post, linkedin_post]), context)

        assert "editing_social_post_id" not in update
        assert update["response"] == POST_NOT_FOUND_RESPONSE
        assert update["error"]

    async def test_ambiguous_selection(self, make_agents, test_settings, context, twitter_post, linkedin_post):
        agent = ScriptedAgent("post_selector", PostSelectorOutput(confidence=0.2, reasoning="ambiguous"))
        nodes = ConversationNodes(make_agents(post_selector=agent), test_settings)

        update = await nodes.social_post_selector(state_for("edit", posts=[twitter_post, linkedin_post]), context)

        assert update["response"] == "Which post would you like to edit?"
        assert update["suggested_options"] == [
            "Twitter: AI agents are here. #AI...",
            "Linkedin: Five lessons from a year of shipping AI ...",
        ]


class TestPostEdit:
    """帖子编辑节点测试"""

    async def test_success(self, make_agents, test_settings, context, article, twitter_post):
        nodes = ConversationNodes(make_agents(), test_settings)
        state = state_for("make it shorter", article, posts=[twitter_post], editing_social_post_id="p1")

        update = await nodes.social_post_edit(state, context)

        assert update["is_social_post"] is True
        assert update["structured_post"]["post_content"] == "AI is everywhere. #AI"
        assert nodes.agents.post_edit.last_call.target_post.id == "p1"

    async def test_missing_target(self, make_agents, test_settings, context, twitter_post):
        nodes = ConversationNodes(make_agents(), test_settings)
        state = state_for("shorter", posts=[twitter_post], editing_social_post_id="gone")

        update = await nodes.social_post_edit(state, context)

        assert update["response"] == POST_NOT_FOUND_RESPONSE
        assert update["is_social_post"] is False
        assert not nodes.agents.post_edit.called


class TestConversationalNodes:
    """问答与通用对话节点测试"""

    async def test_post_qa(self, make_agents, test_settings, context, article, recording_sink):
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.post_qa(state_for("What's this article about?", article), context)

        assert update["is_social_post"] is False
        assert update["response"] == "The article covers AI trends."
        assert nodes.agents.post_qa.last_call.post_content == article.content
        assert recording_sink.tokens() == ["Analyzing the post and your question..."]

    async def test_support(self, make_agents, test_settings, context, article):
        nodes = ConversationNodes(make_agents(), test_settings)

        update = await nodes.support(state_for("hi", article), context)

        assert update["response"].startswith("Hi!")
        assert nodes.agents.support.last_call.post_title == article.title


class TestHistoryBound:
    """对话窗口上限测试"""

    def test_initial_state_truncates(self):
        state = create_initial_state("hi", "s1", "u1", last_messages=make_history(15))

        assert len(state["last_messages"]) == MAX_HISTORY_PAIRS
        assert state["last_messages"][0]["user_message"] == "question 5"
        assert state["last_messages"][-1]["user_message"] == "question 14"

    async def test_agents_never_see_more_than_window(self, make_agents, test_settings, context, article):
        """测试传给 Agent 的对话不超过上限"""
        nodes = ConversationNodes(make_agents(), test_settings)
        state = create_initial_state("hi", "s1", "u1", last_messages=make_history(25), post=article)

        await nodes.detect_intent(state, context)
        await nodes.support(state, context)

        assert len(nodes.agents.intent.last_call.last_messages) == MAX_HISTORY_PAIRS
        assert len(nodes.agents.support.last_call.last_messages) == MAX_HISTORY_PAIRS
