"""
LLM 模块
========

提供语言模型的创建和管理功能。

支持的 LLM 提供商：
- OpenAI
- Anthropic
- 本地模型 (通过兼容 API)
"""

from feedmind.llm.factory import LLMFactory

__all__ = [
    "LLMFactory",
]
