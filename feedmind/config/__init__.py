"""
配置模块
========
提供系统配置与提示词模板管理功能。
"""
from feedmind.config.settings import Settings, LLMConfig, AgentConfig, get_settings, reload_settings
from feedmind.config.prompts import PromptTemplates, get_prompt

__all__ = [
    "Settings",
    "LLMConfig",
    "AgentConfig",
    "get_settings",
    "reload_settings",
    "PromptTemplates",
    "get_prompt",
]
