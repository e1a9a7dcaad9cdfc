"""
Agent 基类模块
==============

定义所有能力 Agent 的基类和注册机制。

每个能力 Agent 都是一次模型调用的类型化封装：
输入经 input_model 校验，输出必须能转换为 output_model，
否则抛出 SchemaValidationError，绝不部分信任模型输出。
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Type, Union

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, ValidationError

from feedmind.config.settings import Settings, get_settings
from feedmind.config.prompts import PromptTemplates
from feedmind.types import SchemaValidationError, SimplifiedMessage
from feedmind.utils.logger import get_logger


class AgentRegistry:
    """
    Agent 注册表

    只登记 Agent 类；实例由调用方在启动时显式创建并注入对话图。
    """

    _agents: Dict[str, Type["BaseAgent"]] = {}

    @classmethod
    def register(cls, name: str, agent_class: Type["BaseAgent"]) -> None:
        cls._agents[name] = agent_class

    @classmethod
    def get_class(cls, name: str) -> Optional[Type["BaseAgent"]]:
        return cls._agents.get(name)

    @classmethod
    def list_agents(cls) -> List[str]:
        return list(cls._agents.keys())


def register_agent(name: str) -> Callable:
    """
    Agent 注册装饰器

    使用方式：
        @register_agent("intent")
        class IntentAgent(BaseAgent):
            ...
    """
    def decorator(cls: Type["BaseAgent"]) -> Type["BaseAgent"]:
        AgentRegistry.register(name, cls)
        return cls
    return decorator


def history_to_messages(last_messages: Iterable[SimplifiedMessage]) -> List[BaseMessage]:
    """把对话窗口展开为交替的 Human/AI 消息"""
    messages: List[BaseMessage] = []
    for pair in last_messages:
        messages.append(HumanMessage(content=pair.user_message))
        messages.append(AIMessage(content=pair.ai_response))
    return messages


class BaseAgent(ABC):
    """
    能力 Agent 抽象基类

    子类声明 input_model / output_model 并实现 build_messages。
    Agent 本身无状态，可在多个并发会话之间共享。

    属性:
        name: Agent 名称，同时决定提示词模板名 <NAME>_SYSTEM
        llm: 语言模型实例
        settings: 系统配置
    """

    input_model: ClassVar[Type[BaseModel]]
    output_model: ClassVar[Type[BaseModel]]

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        settings: Optional[Settings] = None,
    ):
        """
        初始化 Agent

        Args:
            llm: 语言模型实例，None 时按 Agent 配置从工厂创建
            settings: 配置实例
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(self.__class__.__name__)
        self._llm = llm
        self._config = self.settings.get_agent_config(self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent 名称"""

    @property
    @abstractmethod
    def description(self) -> str:
        """Agent 描述"""

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            from feedmind.llm.factory import LLMFactory
            self._llm = LLMFactory.for_agent(self.name, self.settings)
        return self._llm

    @property
    def timeout_seconds(self) -> Optional[float]:
        return self._config.timeout_seconds if self._config else None

    def get_system_prompt(self, **kwargs: Any) -> str:
        if self._config and self._config.custom_prompt:
            return self._config.custom_prompt
        return PromptTemplates.get(f"{self.name.upper()}_SYSTEM", **kwargs)

    @abstractmethod
    def build_messages(self, request: BaseModel) -> List[BaseMessage]:
        """
        根据已校验的输入构建发送给模型的消息列表

        Args:
            request: input_model 实例

        Returns:
            消息列表
        """

    async def ainvoke(self, payload: Union[BaseModel, Dict[str, Any]]) -> BaseModel:
        """
        执行一次模型调用

        处理流程：
        1. 校验输入
        2. 构建消息
        3. 调用结构化输出模型（带超时）
        4. 校验输出结构

        Args:
            payload: 输入模型实例或等价字典

        Returns:
            output_model 实例

        Raises:
            SchemaValidationError: 模型输出无法转换为 output_model
        """
        request = self._validate_input(payload)
        messages = self.build_messages(request)

        start_time = time.time()
        self.logger.info(f"[Agent:{self.name}] 开始调用，消息数 {len(messages)}")

        raw = await self._call_structured(messages)
        result = self.parse_output(raw)

        self.logger.info(f"[Agent:{self.name}] 调用完成，耗时 {time.time() - start_time:.2f}s")
        return result

    def _validate_input(self, payload: Union[BaseModel, Dict[str, Any]]) -> BaseModel:
        if isinstance(payload, self.input_model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        return self.input_model.model_validate(payload)

    async def _call_structured(self, messages: List[BaseMessage]) -> Any:
        runnable = self.llm.with_structured_output(self.output_model)
        try:
            return await asyncio.wait_for(runnable.ainvoke(messages), timeout=self.timeout_seconds)
        except (OutputParserException, ValidationError) as e:
            raise SchemaValidationError(self.name, str(e)) from e

    def parse_output(self, raw: Any) -> BaseModel:
        """
        把模型返回值转换为 output_model

        Raises:
            SchemaValidationError: 返回值为空或结构不符
        """
        if isinstance(raw, self.output_model):
            return raw
        if raw is None:
            raise SchemaValidationError(self.name, "模型没有返回结构化输出")
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        if not isinstance(raw, dict):
            raise SchemaValidationError(self.name, f"期望对象，实际为 {type(raw).__name__}")
        try:
            return self.output_model.model_validate(raw)
        except ValidationError as e:
            raise SchemaValidationError(self.name, str(e)) from e

    def system_message(self, **kwargs: Any) -> SystemMessage:
        return SystemMessage(content=self.get_system_prompt(**kwargs))
