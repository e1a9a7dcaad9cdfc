"""
Agent 模块
==========

包含对话图使用的全部能力 Agent：
- IntentAgent: 意图识别
- SocialIntentAgent: 新建/编辑判断
- PlatformAgent: 目标平台识别
- PostSelectorAgent: 待编辑帖子选择
- PostCreateAgent: 社交帖子生成
- PostEditAgent: 社交帖子编辑
- PostQAAgent: 文章问答
- SupportAgent: 通用对话

Agent 在启动时通过 create_agents 显式创建，再注入 build_graph。
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional

from langchain_core.language_models import BaseChatModel

from feedmind.agents.base import AgentRegistry, BaseAgent, history_to_messages, register_agent
from feedmind.agents.intent import IntentAgent
from feedmind.agents.social_intent import SocialIntentAgent
from feedmind.agents.platform import PlatformAgent
from feedmind.agents.post_selector import PostSelectorAgent
from feedmind.agents.post_create import PostCreateAgent
from feedmind.agents.post_edit import PostEditAgent
from feedmind.agents.post_qa import PostQAAgent
from feedmind.agents.support import SupportAgent
from feedmind.config.settings import Settings, get_settings


@dataclass
class CapabilityAgents:
    """对话图节点依赖的能力 Agent 集合"""

    intent: BaseAgent
    social_intent: BaseAgent
    platform: BaseAgent
    post_selector: BaseAgent
    post_create: BaseAgent
    post_edit: BaseAgent
    post_qa: BaseAgent
    support: BaseAgent

    def as_dict(self) -> Dict[str, BaseAgent]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def create_agents(
    settings: Optional[Settings] = None,
    llm: Optional[BaseChatModel] = None,
) -> CapabilityAgents:
    """
    创建全部能力 Agent

    Args:
        settings: 配置实例，None 使用全局配置
        llm: 共享的语言模型，None 时各 Agent 按自身配置从工厂创建

    Returns:
        CapabilityAgents 实例

    Raises:
        ValueError: 某个能力没有注册 Agent 类
    """
    settings = settings or get_settings()
    agents: Dict[str, BaseAgent] = {}
    for capability in fields(CapabilityAgents):
        agent_class = AgentRegistry.get_class(capability.name)
        if agent_class is None:
            raise ValueError(f"未注册的 Agent: {capability.name}")
        agents[capability.name] = agent_class(llm=llm, settings=settings)
    return CapabilityAgents(**agents)


__all__ = [
    "BaseAgent",
    "AgentRegistry",
    "register_agent",
    "history_to_messages",
    "IntentAgent",
    "SocialIntentAgent",
    "PlatformAgent",
    "PostSelectorAgent",
    "PostCreateAgent",
    "PostEditAgent",
    "PostQAAgent",
    "SupportAgent",
    "CapabilityAgents",
    "create_agents",
]
