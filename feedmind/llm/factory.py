"""
LLM 工厂模块
============

按 Agent 配置创建语言模型实例。

分类类 Agent（意图、平台、帖子选择）与生成类 Agent 使用不同的温度，
配置完全相同的 Agent 共享同一个底层客户端。
"""

from typing import Callable, Dict, Optional

from langchain_core.language_models import BaseChatModel

from feedmind.config.settings import LLMConfig, Settings, get_settings
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


def _openai(config: LLMConfig) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    kwargs = {
        "model": config.model_name,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
        "max_retries": config.max_retries,
    }
    if config.api_key:
        kwargs["api_key"] = config.api_key
    if config.base_url:
        kwargs["base_url"] = config.base_url
    return ChatOpenAI(**kwargs)


def _anthropic(config: LLMConfig) -> BaseChatModel:
    from langchain_anthropic import ChatAnthropic

    kwargs = {
        "model": config.model_name,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
        "max_retries": config.max_retries,
    }
    if config.api_key:
        kwargs["api_key"] = config.api_key
    return ChatAnthropic(**kwargs)


def _local(config: LLMConfig) -> BaseChatModel:
    """OpenAI 兼容接口的本地模型（Ollama、vLLM 等）"""
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=config.model_name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        max_retries=config.max_retries,
        base_url=config.base_url or "http://localhost:11434/v1",
        api_key=config.api_key or "not-needed",
    )


class LLMFactory:
    """
    LLM 工厂类

    使用示例：
        >>> llm = LLMFactory.for_agent("intent")
        >>> llm = LLMFactory.create(LLMConfig(provider="anthropic", model_name="claude-3-5-sonnet-latest"))
    """

    _providers: Dict[str, Callable[[LLMConfig], BaseChatModel]] = {
        "openai": _openai,
        "anthropic": _anthropic,
        "local": _local,
    }
    _instances: Dict[str, BaseChatModel] = {}

    @staticmethod
    def cache_key(config: LLMConfig) -> str:
        # 覆盖全部字段，凭据或重试次数不同的配置不能共用客户端
        return repr(sorted(config.model_dump().items()))

    @classmethod
    def create(cls, config: LLMConfig) -> BaseChatModel:
        """
        创建或复用 LLM 实例

        Args:
            config: LLM 配置

        Returns:
            LLM 实例

        Raises:
            ValueError: 不支持的提供商
        """
        key = cls.cache_key(config)
        if key in cls._instances:
            return cls._instances[key]

        builder = cls._providers.get(config.provider)
        if builder is None:
            raise ValueError(f"不支持的 LLM 提供商: {config.provider}")

        logger.info(f"创建 LLM: {config.provider}/{config.model_name} (temperature={config.temperature})")
        llm = cls._instances[key] = builder(config)
        return llm

    @classmethod
    def for_agent(cls, agent_name: str, settings: Optional[Settings] = None) -> BaseChatModel:
        """按 Agent 的配置（含温度与模型覆盖）创建 LLM"""
        settings = settings or get_settings()
        return cls.create(settings.get_llm_config(agent_name))

    @classmethod
    def clear_cache(cls) -> None:
        cls._instances.clear()
        logger.info("LLM 缓存已清空")
