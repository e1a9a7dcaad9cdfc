"""
配置管理模块
============
使用 Pydantic 进行配置验证，支持环境变量和 .env 文件。
"""
from functools import lru_cache
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from feedmind.types import MAX_HISTORY_PAIRS

class LLMConfig(BaseModel):
    provider: Literal["openai", "anthropic", "local"] = "openai"
    model_name: str = "gpt-4.1-mini"
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=2048, gt=0)
    max_retries: int = Field(default=2, ge=0)
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0 <= v <= 2:
            raise ValueError("temperature 必须在 0 到 2 之间")
        return v

class AgentConfig(BaseModel):
    name: str
    llm_override: Optional[LLMConfig] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    timeout_seconds: float = Field(default=60.0, gt=0)
    custom_prompt: Optional[str] = None

# 分类类 Agent 使用确定性输出，生成类 Agent 保留默认温度
_CLASSIFIER_AGENTS = ("intent", "social_intent", "platform", "post_selector")
_GENERATOR_AGENTS = ("post_create", "post_edit", "post_qa", "support")

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
    llm_provider: Literal["openai", "anthropic", "local"] = Field(default="openai", alias="LLM_PROVIDER")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(default="claude-3-5-sonnet-latest", alias="ANTHROPIC_MODEL")
    local_model_url: str = Field(default="http://localhost:11434/v1", alias="LOCAL_MODEL_URL")
    local_model_name: str = Field(default="llama3", alias="LOCAL_MODEL_NAME")
    llm_temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=2048, alias="LLM_MAX_TOKENS")
    llm_max_retries: int = Field(default=2, alias="LLM_MAX_RETRIES")
    debug_mode: bool = Field(default=False, alias="DEBUG_MODE")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    history_window: int = Field(default=MAX_HISTORY_PAIRS, ge=0, le=MAX_HISTORY_PAIRS, alias="HISTORY_WINDOW")
    auto_select_single_post: bool = Field(default=True, alias="AUTO_SELECT_SINGLE_POST")
    default_response: str = Field(default="I'm not sure how to help with that.", alias="DEFAULT_RESPONSE")
    graph_recursion_limit: int = Field(default=25, ge=1, alias="GRAPH_RECURSION_LIMIT")
    social_posts_path: str = Field(default="data/social_posts.json", alias="SOCIAL_POSTS_PATH")
    agents: Dict[str, AgentConfig] = Field(default_factory=dict)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_default_agents()

    def _init_default_agents(self) -> None:
        for name in _CLASSIFIER_AGENTS:
            if name not in self.agents:
                self.agents[name] = AgentConfig(name=name, temperature=0.0, timeout_seconds=30.0)
        for name in _GENERATOR_AGENTS:
            if name not in self.agents:
                self.agents[name] = AgentConfig(name=name)

    def get_llm_config(self, agent_name: Optional[str] = None) -> LLMConfig:
        agent_config = self.agents.get(agent_name) if agent_name else None
        if agent_config and agent_config.llm_override:
            return agent_config.llm_override
        temperature = self.llm_temperature
        if agent_config and agent_config.temperature is not None:
            temperature = agent_config.temperature
        if self.llm_provider == "openai":
            return LLMConfig(provider="openai", model_name=self.openai_model, temperature=temperature, max_tokens=self.llm_max_tokens, max_retries=self.llm_max_retries, api_key=self.openai_api_key, base_url=self.openai_base_url)
        elif self.llm_provider == "anthropic":
            return LLMConfig(provider="anthropic", model_name=self.anthropic_model, temperature=temperature, max_tokens=self.llm_max_tokens, max_retries=self.llm_max_retries, api_key=self.anthropic_api_key)
        else:
            return LLMConfig(provider="local", model_name=self.local_model_name, temperature=temperature, max_tokens=self.llm_max_tokens, max_retries=self.llm_max_retries, base_url=self.local_model_url)

    def get_agent_config(self, agent_name: str) -> Optional[AgentConfig]:
        return self.agents.get(agent_name)

@lru_cache()
def get_settings() -> Settings:
    return Settings()

def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
