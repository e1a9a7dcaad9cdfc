"""
Pytest 配置文件
===============

定义测试固件和通用配置。

能力 Agent 全部替换为按脚本返回结果的 ScriptedAgent，
不会发出任何真实的模型调用。
"""

import asyncio
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# 确保项目根目录在路径中
sys.path.insert(0, str(Path(__file__).parent.parent))

from feedmind.agents import CapabilityAgents
from feedmind.config.settings import Settings, get_settings
from feedmind.graph.context import ExecutionContext, RecordingEventSink
from feedmind.memory import ConversationMemory
from feedmind.types import (
    ConversationalOutput,
    IntentOutput,
    PlatformOutput,
    PostContext,
    PostGenerationOutput,
    PostSelectorOutput,
    SimplifiedMessage,
    SocialIntentOutput,
    SocialPostData,
    SocialPostNotFoundError,
    SocialPostRecord,
    StructuredPost,
)


class ScriptedAgent:
    """
    脚本化的能力 Agent

    按顺序返回预设输出（只剩一个时重复返回），并记录每次调用的输入。
    """

    def __init__(self, name: str, *outputs: Any, error: Optional[BaseException] = None, delay: float = 0.0):
        self.name = name
        self.outputs: List[Any] = list(outputs)
        self.error = error
        self.delay = delay
        self.calls: List[Any] = []

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def last_call(self) -> Any:
        return self.calls[-1]

    async def ainvoke(self, payload: Any) -> Any:
        self.calls.append(payload)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.outputs:
            raise AssertionError(f"{self.name} 没有预设输出")
        return self.outputs[0] if len(self.outputs) == 1 else self.outputs.pop(0)


class InMemoryPostStore:
    """内存中的帖子存储，同时满足 Persistence provider 与帖子查询接口"""

    def __init__(self):
        self.records: Dict[str, SocialPostRecord] = {}
        self.writes = 0

    def add(self, record: SocialPostRecord) -> SocialPostRecord:
        self.records[record.id] = record
        return record

    def list_session_posts(self, session_id: str) -> List[SocialPostRecord]:
        return [r for r in self.records.values() if r.session_id == session_id]

    async def load_session_posts(self, session_id: str) -> List[SocialPostRecord]:
        return self.list_session_posts(session_id)

    async def create_social_post(self, session_id, user_id, post_id, data: SocialPostData) -> SocialPostRecord:
        self.writes += 1
        record = SocialPostRecord(
            id=f"sp_{uuid.uuid4().hex[:6]}",
            session_id=session_id,
            user_id=user_id,
            post_id=post_id,
            **data.model_dump(),
        )
        return self.add(record)

    async def update_social_post(self, session_id, social_post_id, user_id, data: SocialPostData) -> SocialPostRecord:
        self.writes += 1
        existing = self.records.get(social_post_id)
        if existing is None:
            raise SocialPostNotFoundError(social_post_id, session_id)
        record = SocialPostRecord.model_validate({**existing.model_dump(), **data.model_dump()})
        return self.add(record)


# ===== 预设输出 =====

def intent_output(intent: str, **kwargs) -> IntentOutput:
    return IntentOutput(type=intent, confidence=kwargs.pop("confidence", 0.9), reasoning="test", **kwargs)


def generation_output(content: str, message: str = "Here is your post") -> PostGenerationOutput:
    return PostGenerationOutput(
        message=message,
        structured_post=StructuredPost(post_content=content),
        suggested_options=["Make it shorter", "Add hashtags"],
    )


def default_agents(**overrides: ScriptedAgent) -> CapabilityAgents:
    agents = {
        "intent": ScriptedAgent("intent", intent_output("GENERAL")),
        "social_intent": ScriptedAgent(
            "social_intent", SocialIntentOutput(action="CREATE", confidence=0.9, reasoning="test")
        ),
        "platform": ScriptedAgent(
            "platform",
            PlatformOutput(platform="linkedin", confidence=0.95, needs_clarification=False, message="LinkedIn it is"),
        ),
        "post_selector": ScriptedAgent(
            "post_selector",
            PostSelectorOutput(selected_post_id=None, confidence=0.3, reasoning="ambiguous", message="Which post?"),
        ),
        "post_create": ScriptedAgent("post_create", generation_output("AI trends are reshaping every industry.")),
        "post_edit": ScriptedAgent("post_edit", generation_output("AI is everywhere. #AI", message="Made it shorter")),
        "post_qa": ScriptedAgent(
            "post_qa",
            ConversationalOutput(response="The article covers AI trends.", suggested_options=["What about LLMs?"]),
        ),
        "support": ScriptedAgent(
            "support",
            ConversationalOutput(response="Hi! I can answer questions and write posts.", suggested_options=["Summarize"]),
        ),
    }
    agents.update(overrides)
    return CapabilityAgents(**agents)


@pytest.fixture
def test_settings(tmp_path):
    """创建测试用配置"""
    return Settings(
        llm_provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4.1-mini",
        debug_mode=False,
        log_dir=str(tmp_path / "logs"),
        social_posts_path=str(tmp_path / "social_posts.json"),
    )


@pytest.fixture
def make_agents():
    """按需覆盖部分 Agent 的工厂"""
    return default_agents


@pytest.fixture
def recording_sink():
    return RecordingEventSink()


@pytest.fixture
def context(recording_sink):
    return ExecutionContext(session_id="s1", thread_id="t1", sink=recording_sink)


@pytest.fixture
def article():
    """示例文章"""
    return PostContext(
        title="AI Trends 2025",
        summary="An overview of where AI is heading.",
        content="Artificial intelligence is moving fast. Agents, multimodal models and on-device inference lead the way.",
    )


@pytest.fixture
def post_store():
    return InMemoryPostStore()


@pytest.fixture
def memory(post_store):
    return ConversationMemory(max_sessions=10, post_store=post_store)


@pytest.fixture
def twitter_post():
    return SocialPostRecord(id="p1", session_id="s1", user_id="u1", platform="twitter", content="AI agents are here. #AI")


@pytest.fixture
def linkedin_post():
    return SocialPostRecord(
        id="p2", session_id="s1", user_id="u1", platform="linkedin", content="Five lessons from a year of shipping AI agents"
    )


def make_history(n: int) -> List[SimplifiedMessage]:
    return [SimplifiedMessage(user_message=f"question {i}", ai_response=f"answer {i}") for i in range(n)]


@pytest.fixture(autouse=True)
def setup_test_env(tmp_path, monkeypatch):
    """设置测试环境"""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("SOCIAL_POSTS_PATH", str(tmp_path / "social_posts.json"))
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()
