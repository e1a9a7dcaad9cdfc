"""
工具模块
========

提供日志、可视化等辅助功能。
"""

from feedmind.utils.logger import (
    SessionLoggerAdapter,
    get_logger,
    session_logger,
    setup_logger,
)
from feedmind.utils.visualizer import (
    ExecutionVisualizer,
    generate_mermaid_graph,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "session_logger",
    "SessionLoggerAdapter",
    "ExecutionVisualizer",
    "generate_mermaid_graph",
]
