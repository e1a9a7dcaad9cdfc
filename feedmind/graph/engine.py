"""
图引擎模块
==========

通用的有向图执行器：注册节点、普通边与条件边，编译时做完整校验，
运行时基于 LangGraph 的 StateGraph 顺序执行各节点并浅合并状态更新。

与直接使用 StateGraph 的区别：
- 节点签名为 (state, context)，执行上下文通过 RunnableConfig 显式传入
- 路由返回值必须在声明的目标集合内，否则抛出 RoutingError
- 编译时一次性报告所有结构问题（GraphValidationError）
- 节点异常统一包装为 NodeExecutionError，取消信号原样传出

编译结果不保存任何单次运行的数据，可以在并发的多个会话之间共享。
"""

import inspect
import time
from collections import deque
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    Type,
)

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from feedmind.graph.context import ExecutionContext
from feedmind.types import (
    DuplicateNodeError,
    GraphValidationError,
    NodeExecutionError,
    NodeHandler,
    RouterFunction,
    RoutingError,
    TurnCancelledError,
)
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)

# RunnableConfig["configurable"] 中保存执行上下文的键
CONTEXT_KEY = "execution_context"

_RESERVED = {START, END}


class _ConditionalEdge:
    __slots__ = ("source", "router", "targets")

    def __init__(self, source: str, router: RouterFunction, targets: frozenset):
        self.source = source
        self.router = router
        self.targets = targets


class WorkflowGraph:
    """
    工作流图构建器

    使用示例：
        >>> graph = WorkflowGraph(ConversationState)
        >>> graph.add_node("detect_intent", detect_intent)
        >>> graph.set_entry_point("detect_intent")
        >>> graph.add_conditional_edge("detect_intent", route_by_intent, {"support", END})
        >>> graph.add_edge("support", END)
        >>> workflow = graph.compile()
    """

    def __init__(self, state_schema: Type[Any], name: str = "workflow"):
        self.state_schema = state_schema
        self.name = name
        self._nodes: Dict[str, NodeHandler] = {}
        self._edges: List[Tuple[str, str]] = []
        self._conditional: List[_ConditionalEdge] = []
        self._entries: List[str] = []

    @property
    def nodes(self) -> List[str]:
        return list(self._nodes.keys())

    def add_node(self, name: str, fn: NodeHandler) -> "WorkflowGraph":
        """
        注册节点

        Args:
            name: 节点名称，必须唯一
            fn: 节点函数 (state, context) -> 部分状态更新，可以是协程函数

        Raises:
            DuplicateNodeError: 名称已被占用（包括 START/END 保留名）
        """
        if name in self._nodes or name in _RESERVED:
            raise DuplicateNodeError(name)
        self._nodes[name] = fn
        return self

    def add_edge(self, source: str, target: str) -> "WorkflowGraph":
        """添加普通边；source 为 START 时声明入口，target 可以是 END"""
        if source == START:
            self._entries.append(target)
        else:
            self._edges.append((source, target))
        return self

    def set_entry_point(self, name: str) -> "WorkflowGraph":
        return self.add_edge(START, name)

    def add_conditional_edge(
        self,
        source: str,
        router: RouterFunction,
        allowed_targets: Iterable[str],
    ) -> "WorkflowGraph":
        """
        添加条件边

        Args:
            source: 源节点
            router: 路由函数 state -> 下一个节点名或 END
            allowed_targets: 路由允许返回的目标集合
        """
        self._conditional.append(_ConditionalEdge(source, router, frozenset(allowed_targets)))
        return self

    # ===== 校验 =====

    def validate(self) -> List[str]:
        """返回发现的所有结构问题，空列表表示图结构正确"""
        problems: List[str] = []
        known = set(self._nodes)

        if not self._entries:
            problems.append("未声明入口节点")
        elif len(self._entries) > 1:
            problems.append(f"入口边不唯一: {self._entries}")
        for entry in self._entries:
            if entry not in known:
                problems.append(f"入口节点未注册: {entry}")

        for source, target in self._edges:
            if source not in known:
                problems.append(f"边 {source} -> {target} 的源节点未注册")
            if target not in known and target != END:
                problems.append(f"边 {source} -> {target} 的目标节点未注册")

        conditional_sources: Dict[str, int] = {}
        for edge in self._conditional:
            conditional_sources[edge.source] = conditional_sources.get(edge.source, 0) + 1
            if edge.source not in known:
                problems.append(f"条件边的源节点未注册: {edge.source}")
            if not edge.targets:
                problems.append(f"条件边 {edge.source} 没有声明任何目标")
            for target in sorted(edge.targets):
                if target not in known and target != END:
                    problems.append(f"条件边 {edge.source} 的目标未注册: {target}")

        for name in self._nodes:
            plain = sum(1 for s, _ in self._edges if s == name)
            branches = conditional_sources.get(name, 0)
            if plain == 0 and branches == 0:
                problems.append(f"节点 {name} 没有出边")
            if plain > 1:
                problems.append(f"节点 {name} 有 {plain} 条普通出边")
            if branches > 1:
                problems.append(f"节点 {name} 有 {branches} 组条件边")
            if plain and branches:
                problems.append(f"节点 {name} 同时声明了普通边和条件边")

        if len(self._entries) == 1 and self._entries[0] in known:
            reachable = self._reachable_from(self._entries[0])
            for name in self._nodes:
                if name not in reachable:
                    problems.append(f"节点 {name} 从入口 {self._entries[0]} 不可达")

        return problems

    def _successors(self, name: str) -> Set[str]:
        result = {t for s, t in self._edges if s == name}
        for edge in self._conditional:
            if edge.source == name:
                result.update(edge.targets)
        return result

    def _reachable_from(self, entry: str) -> Set[str]:
        seen = {entry}
        queue = deque([entry])
        while queue:
            for nxt in self._successors(queue.popleft()):
                if nxt in self._nodes and nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return seen

    # ===== 编译 =====

    def compile(self, recursion_limit: int = 25) -> "CompiledWorkflow":
        """
        校验并编译为可执行的工作流

        Args:
            recursion_limit: 单次运行允许的最大步数

        Returns:
            CompiledWorkflow 实例

        Raises:
            GraphValidationError: 图结构存在问题，列出全部问题
        """
        problems = self.validate()
        if problems:
            raise GraphValidationError(problems)

        builder = StateGraph(self.state_schema)
        for name, fn in self._nodes.items():
            builder.add_node(name, _wrap_node(name, fn))

        builder.add_edge(START, self._entries[0])
        for source, target in self._edges:
            builder.add_edge(source, target)
        for edge in self._conditional:
            builder.add_conditional_edges(
                edge.source,
                _wrap_router(edge.source, edge.router, edge.targets),
                {target: target for target in edge.targets},
            )

        logger.info(f"[Graph] {self.name} 编译完成，节点 {len(self._nodes)} 个")
        return CompiledWorkflow(
            graph=builder.compile(),
            name=self.name,
            entry=self._entries[0],
            nodes=list(self._nodes),
            edges=list(self._edges),
            branches={e.source: e.targets for e in self._conditional},
            recursion_limit=recursion_limit,
        )


def _context_from(config: Optional[RunnableConfig]) -> ExecutionContext:
    context = (config or {}).get("configurable", {}).get(CONTEXT_KEY)
    if context is None:
        raise RuntimeError("RunnableConfig 中缺少执行上下文")
    return context


def _wrap_node(name: str, fn: NodeHandler):
    """把 (state, context) 节点包装为 LangGraph 节点"""

    async def run(state, config: RunnableConfig) -> Dict[str, Any]:
        context = _context_from(config)
        context.raise_if_cancelled(name)

        logger.info(f"[Node] {name}")
        start_time = time.time()
        try:
            update = fn(state, context)
            if inspect.isawaitable(update):
                update = await update
        except TurnCancelledError:
            raise
        except Exception as e:
            logger.error(f"[Node] {name} 执行失败: {e}")
            raise NodeExecutionError(name, e) from e

        if update is None:
            update = {}
        if not isinstance(update, Mapping):
            raise NodeExecutionError(name, TypeError(f"节点应返回映射，实际为 {type(update).__name__}"))

        # None 值不参与合并，节点不能清空前序节点的字段
        cleaned = {key: value for key, value in update.items() if value is not None}
        logger.debug(f"[Node] {name} 完成，耗时 {time.time() - start_time:.2f}s，更新字段 {sorted(cleaned)}")
        return cleaned

    run.__name__ = name
    return run


def _wrap_router(source: str, router: RouterFunction, targets: frozenset):
    def route(state) -> str:
        target = router(state)
        if target not in targets:
            raise RoutingError(source, target, targets)
        return target

    route.__name__ = f"route_{source}"
    return route


def _shallow_merge(state: Dict[str, Any], update: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    merged = dict(state)
    for key, value in (update or {}).items():
        if value is not None:
            merged[key] = value
    return merged


class CompiledWorkflow:
    """
    编译后的工作流

    只持有图结构，不持有任何单次运行的数据。
    """

    def __init__(
        self,
        graph: Any,
        name: str,
        entry: str,
        nodes: List[str],
        edges: List[Tuple[str, str]],
        branches: Dict[str, frozenset],
        recursion_limit: int = 25,
    ):
        self._graph = graph
        self.name = name
        self.entry = entry
        self.nodes = nodes
        self.edges = edges
        self.branches = branches
        self.recursion_limit = recursion_limit

    def _config(self, context: ExecutionContext) -> RunnableConfig:
        return {
            "configurable": {CONTEXT_KEY: context},
            "recursion_limit": self.recursion_limit,
            "run_name": self.name,
        }

    async def ainvoke(
        self,
        initial_state: Mapping[str, Any],
        context: Optional[ExecutionContext] = None,
    ) -> Dict[str, Any]:
        """
        从入口节点运行到终止

        Args:
            initial_state: 初始状态
            context: 执行上下文，None 时创建一个不推送事件的上下文

        Returns:
            合并后的最终状态

        Raises:
            NodeExecutionError: 任一节点执行失败，剩余节点不再执行
            RoutingError: 路由返回了未声明的目标
            TurnCancelledError: 调用方取消了本轮对话
        """
        context = context or ExecutionContext(session_id=str(initial_state.get("session_id", "")))
        context.raise_if_cancelled()
        result = await self._graph.ainvoke(dict(initial_state), config=self._config(context))
        return dict(result)

    async def stream(
        self,
        initial_state: Mapping[str, Any],
        context: Optional[ExecutionContext] = None,
    ) -> AsyncIterator[Tuple[str, Dict[str, Any]]]:
        """
        逐步运行，每个节点完成后产出 (节点名, 合并后的状态快照)
        """
        context = context or ExecutionContext(session_id=str(initial_state.get("session_id", "")))
        context.raise_if_cancelled()

        state = dict(initial_state)
        async for chunk in self._graph.astream(state, config=self._config(context), stream_mode="updates"):
            for node_name, update in chunk.items():
                state = _shallow_merge(state, update)
                yield node_name, dict(state)

    def successors(self, name: str) -> Set[str]:
        result = {t for s, t in self.edges if s == name}
        result.update(self.branches.get(name, frozenset()))
        return result

    def draw_mermaid(self) -> str:
        return self._graph.get_graph().draw_mermaid()
