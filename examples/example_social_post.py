"""
示例：新建并修改社交帖子
========================

演示同一会话中的三轮对话：就文章提问、生成 LinkedIn 帖子、再把帖子改短。
每轮结束后打印执行轨迹与结果。

运行方式：
    python -m examples.example_social_post
"""

import asyncio
import os
import sys

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.console import Console
from rich.panel import Panel

from feedmind.config.settings import get_settings
from feedmind.graph.context import ExecutionContext, RecordingEventSink
from feedmind.services import ChatTurnService
from feedmind.types import PostContext
from feedmind.utils.logger import setup_logger

ARTICLE = PostContext(
    title="AI Trends 2025",
    summary="Agents, multimodal models and on-device inference are reshaping software.",
    content=(
        "Artificial intelligence is moving fast. In 2025 three trends stand out: "
        "autonomous agents that plan and use tools, multimodal models that read images and audio, "
        "and small models that run directly on phones and laptops."
    ),
)

TURNS = [
    "What's this article about?",
    "Create a LinkedIn post about it",
    "Make it shorter",
]


async def run_demo(console: Console) -> None:
    settings = get_settings()
    service = ChatTurnService.from_settings(settings)
    session_id = "demo"

    for message in TURNS:
        console.print(f"\n[bold green]你:[/bold green] {message}")

        sink = RecordingEventSink()
        result = await service.run_turn(
            message,
            session_id=session_id,
            user_id="demo-user",
            post=ARTICLE,
            context=ExecutionContext(session_id=session_id, sink=sink),
        )

        for token in sink.tokens():
            console.print(f"[dim]… {token}[/dim]")

        if result is None:
            console.print("[red]本轮处理失败，详见日志[/red]")
            return

        if result.is_social_post and result.structured_post:
            console.print(Panel(
                result.structured_post.get("post_content", ""),
                title=f"社交帖子 {result.social_post_id}",
                border_style="green",
            ))
        console.print(Panel(result.response, title="回复", border_style="blue"))


def main():
    """运行社交帖子示例"""
    console = Console()

    # 设置日志
    setup_logger(debug=False)

    console.print(Panel(
        "[bold blue]示例: 新建并修改社交帖子[/bold blue]\n\n"
        f"文章: {ARTICLE.title}",
        title="FeedMind Demo"
    ))

    try:
        asyncio.run(run_demo(console))
    except Exception as e:
        console.print(f"[red]错误: {e}[/red]")
        console.print_exception()


if __name__ == "__main__":
    main()
