"""
配置测试
========

测试环境变量配置、Agent 默认配置以及提示词模板。
"""

import pytest
from pydantic import ValidationError

from feedmind.config import LLMConfig, PromptTemplates, Settings, get_prompt, get_settings, reload_settings
from feedmind.types import MAX_HISTORY_PAIRS


class TestSettings:
    """配置测试"""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setenv("AUTO_SELECT_SINGLE_POST", "false")

        settings = reload_settings()

        assert settings.llm_provider == "anthropic"
        assert settings.auto_select_single_post is False
        assert settings.get_llm_config().api_key == "sk-ant-test"

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_defaults(self):
        settings = Settings()

        assert settings.history_window == MAX_HISTORY_PAIRS
        assert settings.default_response == "I'm not sure how to help with that."
        assert settings.graph_recursion_limit == 25

    def test_history_window_bounded(self):
        with pytest.raises(ValidationError):
            Settings(history_window=MAX_HISTORY_PAIRS + 1)

    def test_agent_defaults(self):
        """测试八个能力 Agent 都有默认配置，分类类 Agent 温度为 0"""
        settings = Settings()

        assert len(settings.agents) == 8
        assert settings.get_llm_config("platform").temperature == 0.0
        assert settings.get_llm_config("post_create").temperature == settings.llm_temperature

    def test_llm_override(self):
        override = LLMConfig(provider="local", model_name="llama3", temperature=0.2)
        settings = Settings()
        settings.agents["support"].llm_override = override

        assert settings.get_llm_config("support") is override

    def test_invalid_temperature(self):
        with pytest.raises(ValidationError):
            LLMConfig(temperature=3)


class TestPromptTemplates:
    """提示词模板测试"""

    def test_substitution(self):
        prompt = get_prompt("PLATFORM_SYSTEM", platforms="twitter, linkedin")

        assert "twitter, linkedin" in prompt
        assert "$platforms" not in prompt

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            PromptTemplates.get("NOT_A_TEMPLATE")

    def test_custom_template(self):
        PromptTemplates.set_custom("SUPPORT_SYSTEM", "Custom support for $name")
        try:
            assert PromptTemplates.get("SUPPORT_SYSTEM", name="FeedMind") == "Custom support for FeedMind"
        finally:
            PromptTemplates.reset_custom("SUPPORT_SYSTEM")

        assert "friendly assistant" in PromptTemplates.get("SUPPORT_SYSTEM")

    def test_every_agent_has_system_prompt(self):
        templates = PromptTemplates.list_templates()
        for name in ("intent", "social_intent", "platform", "post_selector", "post_create", "post_edit", "post_qa", "support"):
            assert f"{name.upper()}_SYSTEM" in templates
