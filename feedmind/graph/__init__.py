"""
图模块
======

对话状态机：状态、执行上下文、通用图引擎、节点、路由与组装。
"""

from langgraph.graph import END, START

from feedmind.graph.state import ConversationState, create_initial_state
from feedmind.graph.context import (
    STREAM_END,
    STREAM_ERROR,
    STREAM_START,
    STREAM_TOKEN,
    CallbackEventSink,
    ExecutionContext,
    NullEventSink,
    RecordingEventSink,
)
from feedmind.graph.engine import CONTEXT_KEY, CompiledWorkflow, WorkflowGraph
from feedmind.graph.edges import (
    ROUTE_TARGETS,
    ROUTERS,
    route_after_platform,
    route_after_selector,
    route_by_intent,
    route_by_social_intent,
)
from feedmind.graph.nodes import ConversationNodes
from feedmind.graph.builder import build_graph, create_workflow

__all__ = [
    "START",
    "END",
    "ConversationState",
    "create_initial_state",
    "ExecutionContext",
    "NullEventSink",
    "CallbackEventSink",
    "RecordingEventSink",
    "STREAM_START",
    "STREAM_TOKEN",
    "STREAM_END",
    "STREAM_ERROR",
    "CONTEXT_KEY",
    "WorkflowGraph",
    "CompiledWorkflow",
    "ROUTERS",
    "ROUTE_TARGETS",
    "route_by_intent",
    "route_by_social_intent",
    "route_after_platform",
    "route_after_selector",
    "ConversationNodes",
    "build_graph",
    "create_workflow",
]
