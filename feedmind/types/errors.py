"""
异常定义模块
============

系统中所有可抛出的异常。

分类：
- 配置错误（图组装、路由、后处理器缺失）：编程错误，不应被吞掉
- Agent 契约错误：模型输出无法转换为声明的结构
- 节点执行错误：节点内部的任何意外异常，终止本轮对话
- 取消：调用方放弃本轮对话
"""

from typing import Iterable, List, Optional


class FeedMindError(Exception):
    """所有异常的基类"""


class GraphConfigurationError(FeedMindError):
    """图组装或调度配置错误"""


class DuplicateNodeError(GraphConfigurationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"节点已存在: {name}")


class GraphValidationError(GraphConfigurationError):
    """编译时发现的所有问题，而不仅是第一个"""

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        details = "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(f"图校验失败，共 {len(self.problems)} 个问题:\n{details}")


class RoutingError(GraphConfigurationError):
    def __init__(self, source: str, target: object, allowed: Iterable[str]):
        self.source = source
        self.target = target
        self.allowed = frozenset(allowed)
        super().__init__(
            f"路由 {source} 返回了未声明的目标 {target!r}，允许的目标: {sorted(self.allowed)}"
        )


class NoProcessorFoundError(GraphConfigurationError):
    def __init__(self, kind: Optional[str] = None):
        self.kind = kind
        super().__init__(f"没有可处理该结果的后处理器 (kind={kind})")


class SchemaValidationError(FeedMindError):
    def __init__(self, agent_name: str, detail: str):
        self.agent_name = agent_name
        self.detail = detail
        super().__init__(f"[{agent_name}] 模型输出不符合结构定义: {detail}")


class NodeExecutionError(FeedMindError):
    def __init__(self, node: str, original: BaseException):
        self.node = node
        self.original = original
        super().__init__(f"节点 {node} 执行失败: {original!r}")


class TurnCancelledError(FeedMindError):
    def __init__(self, session_id: str = "", node: Optional[str] = None):
        self.session_id = session_id
        self.node = node
        where = f"，位于节点 {node}" if node else ""
        super().__init__(f"会话 {session_id} 的本轮对话已取消{where}")


class SocialPostNotFoundError(FeedMindError):
    def __init__(self, social_post_id: str, session_id: str = ""):
        self.social_post_id = social_post_id
        self.session_id = session_id
        super().__init__(f"会话 {session_id} 中不存在社交帖子 {social_post_id}")
