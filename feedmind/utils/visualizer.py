"""
可视化工具模块
==============

提供对话图拓扑与单轮执行路径的可视化。
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from feedmind.utils.logger import get_logger

logger = get_logger(__name__)

_END = "__end__"


class ExecutionVisualizer:
    """
    执行过程可视化器

    支持的格式：
    - Mermaid: 拓扑图，可高亮本轮经过的节点
    - Text: 纯文本的执行轨迹与摘要
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def generate_mermaid(
        self,
        workflow: Any,
        path: Optional[Sequence[str]] = None,
    ) -> str:
        """
        生成 Mermaid 流程图

        Args:
            workflow: CompiledWorkflow，提供 entry / nodes / edges / branches
            path: 本轮经过的节点，按执行顺序

        Returns:
            Mermaid 格式字符串
        """
        visited = set(path or [])
        lines = ["flowchart TD", "    START((start))", "    END((end))"]

        for node in workflow.nodes:
            lines.append(f"    {node}[{node}]")

        lines.append(f"    START --> {workflow.entry}")
        for source, target in workflow.edges:
            lines.append(f"    {source} --> {self._mermaid_id(target)}")
        for source, targets in workflow.branches.items():
            for target in sorted(targets):
                lines.append(f"    {source} -.-> {self._mermaid_id(target)}")

        if visited:
            lines.append("")
            lines.append("    classDef visited fill:#e8f5e9,stroke:#2e7d32")
            lines.append(f"    class {','.join(n for n in workflow.nodes if n in visited)} visited")

        return "\n".join(lines)

    @staticmethod
    def _mermaid_id(name: str) -> str:
        return "END" if name == _END else name

    def generate_text_trace(
        self,
        path: Sequence[str],
        state: Mapping[str, Any],
        max_width: int = 80,
    ) -> str:
        """
        生成文本格式的执行轨迹

        Args:
            path: 本轮经过的节点
            state: 终态
            max_width: 最大宽度

        Returns:
            文本格式字符串
        """
        lines: List[str] = []
        lines.append("=" * max_width)
        lines.append("执行轨迹".center(max_width))
        lines.append("=" * max_width)

        lines.append(f"会话ID: {state.get('session_id', 'N/A')}")
        lines.append(f"用户消息: {str(state.get('message', ''))[:60]}")
        lines.append("-" * max_width)

        lines.append("节点路径:")
        for i, node in enumerate(path, 1):
            lines.append(f"  {i}. {node}")

        lines.append("-" * max_width)

        intent = state.get("intent_result") or {}
        if intent:
            lines.append(f"意图: {intent.get('type')} ({intent.get('confidence', 0):.2f})")
        if state.get("social_intent_result"):
            lines.append(f"社交意图: {state['social_intent_result']}")
        platform = state.get("platform_result") or {}
        if platform:
            lines.append(f"平台: {platform.get('platform') or '未确定'}")
        if state.get("editing_social_post_id"):
            lines.append(f"编辑帖子: {state['editing_social_post_id']}")
        if state.get("error"):
            lines.append(f"错误: {state['error']}")

        lines.append("=" * max_width)
        return "\n".join(lines)

    def generate_summary(self, state: Mapping[str, Any]) -> str:
        lines = []

        is_social_post = bool(state.get("is_social_post"))
        status = "社交帖子" if is_social_post else "回复"
        if state.get("error"):
            status += "（可恢复错误）"
        lines.append(f"结果: {status}")

        structured_post = state.get("structured_post") or {}
        if is_social_post and structured_post:
            lines.append(f"帖子长度: {len(structured_post.get('post_content', ''))} 字符")
            lines.append(f"代码片段: {len(structured_post.get('code_examples') or [])} 个")

        options = state.get("suggested_options") or []
        if options:
            lines.append(f"建议选项: {len(options)} 个")

        return "\n".join(lines)


def generate_mermaid_graph(workflow: Any, path: Optional[Sequence[str]] = None) -> str:
    """
    便捷函数：生成 Mermaid 图

    Args:
        workflow: CompiledWorkflow
        path: 需要高亮的节点路径

    Returns:
        Mermaid 格式字符串
    """
    return ExecutionVisualizer().generate_mermaid(workflow, path)
