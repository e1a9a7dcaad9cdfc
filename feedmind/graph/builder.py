"""
图构建器模块
============

组装对话图：注册全部节点、入口、条件边与终止边。

这是系统的核心组装点。能力 Agent 由调用方在启动时创建并显式传入，
编译结果可以在所有会话之间共享。
"""

from typing import Optional

from langgraph.graph import END

from feedmind.agents import CapabilityAgents
from feedmind.config.settings import Settings, get_settings
from feedmind.graph.edges import DETECT_INTENT, ROUTE_TARGETS, ROUTERS, TERMINAL_NODES
from feedmind.graph.engine import CompiledWorkflow, WorkflowGraph
from feedmind.graph.nodes import ConversationNodes
from feedmind.graph.state import ConversationState
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)


def build_graph(agents: CapabilityAgents, settings: Optional[Settings] = None) -> WorkflowGraph:
    """
    构建对话图

    图结构：
    ```
    detect_intent --GENERAL--------> support -> END
                  --ASK_POST-------> post_qa -> END
                  --REQ_SOCIAL_POST> social_intent --CREATE--> social_platform_detection -> social_post_create -> END
                                                   --EDIT----> social_post_selector
                  --EDIT_SOCIAL_POST---------------------------> social_post_selector -> social_post_edit -> END
    ```
    detect_intent、social_intent、social_platform_detection、social_post_selector
    在无法继续时都可以直接结束。

    Args:
        agents: 能力 Agent 集合
        settings: 系统配置，None 使用默认配置

    Returns:
        未编译的 WorkflowGraph
    """
    settings = settings or get_settings()
    nodes = ConversationNodes(agents, settings)

    logger.info("开始构建对话图...")
    graph = WorkflowGraph(ConversationState, name="conversation")

    for name, handler in nodes.handlers().items():
        graph.add_node(name, handler)

    graph.set_entry_point(DETECT_INTENT)

    for source, router in ROUTERS.items():
        graph.add_conditional_edge(source, router, ROUTE_TARGETS[source])

    for name in TERMINAL_NODES:
        graph.add_edge(name, END)

    logger.info("对话图构建完成")
    return graph


def create_workflow(agents: CapabilityAgents, settings: Optional[Settings] = None) -> CompiledWorkflow:
    """构建并编译对话图"""
    settings = settings or get_settings()
    return build_graph(agents, settings).compile(recursion_limit=settings.graph_recursion_limit)
