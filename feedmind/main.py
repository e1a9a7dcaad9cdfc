"""
FeedMind 主入口
===============

提供命令行接口和程序入口点：加载一篇文章，然后就这篇文章对话、
生成或修改社交帖子。
"""

import argparse
import asyncio
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from feedmind import __version__
from feedmind.config.settings import Settings, get_settings
from feedmind.graph.context import STREAM_ERROR, STREAM_TOKEN, CallbackEventSink, ExecutionContext
from feedmind.services import ChatTurnService
from feedmind.types import PostContext, PostProcessorResult
from feedmind.utils.logger import get_logger, setup_logger
from feedmind.utils.visualizer import generate_mermaid_graph

# 初始化控制台和日志
console = Console()
logger = get_logger(__name__)


def print_banner() -> None:
    banner = f"""
╔══════════════════════════════════════════════════════════════╗
║          FeedMind Conversational Assistant v{__version__:<17}║
║                 Powered by LangGraph                         ║
╚══════════════════════════════════════════════════════════════╝
    """
    console.print(banner, style="bold blue")


def load_article(path: Optional[str]) -> Optional[PostContext]:
    """
    从文件加载文章

    第一行非空文本作为标题，前两段作为摘要。
    """
    if not path:
        return None

    text = Path(path).read_text(encoding="utf-8").strip()
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    title = lines[0].lstrip("# ") if lines else Path(path).stem
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    summary = " ".join(paragraphs[1:3])[:500] if len(paragraphs) > 1 else None
    return PostContext(title=title, summary=summary, content=text)


def on_event(event: str, payload: Dict[str, Any]) -> None:
    """把进度事件打印到控制台"""
    if event == STREAM_TOKEN:
        console.print(f"[dim]… {payload.get('token', '')}[/dim]")
    elif event == STREAM_ERROR:
        console.print(f"[red]{payload.get('message', '')}[/red]")


def print_result(result: PostProcessorResult) -> None:
    console.print()
    if result.is_social_post and result.structured_post:
        console.print(Panel(
            result.structured_post.get("post_content", ""),
            title=f"[bold green]社交帖子 {result.social_post_id or ''}[/bold green]",
            border_style="green",
        ))
        for example in result.structured_post.get("code_examples") or []:
            console.print(Panel(example.get("code", ""), title=example.get("language", "code"), border_style="cyan"))

    console.print(Panel(Markdown(result.response), title="[bold blue]回复[/bold blue]", border_style="blue"))

    for i, option in enumerate(result.suggested_options, 1):
        console.print(f"  [cyan]{i}.[/cyan] {option}")


async def run_message(
    service: ChatTurnService,
    message: str,
    session_id: str,
    user_id: str,
    article: Optional[PostContext],
    preferences: Optional[str],
) -> Optional[PostProcessorResult]:
    context = ExecutionContext(session_id=session_id, sink=CallbackEventSink(on_event))
    return await service.run_turn(
        message,
        session_id=session_id,
        user_id=user_id,
        post=article,
        content_preferences=preferences,
        context=context,
    )


async def interactive_mode(
    service: ChatTurnService,
    settings: Settings,
    article: Optional[PostContext],
    preferences: Optional[str],
) -> None:
    """交互式模式"""
    console.print("\n[bold cyan]进入交互模式 (输入 'quit' 或 'exit' 退出)[/bold cyan]\n")
    if article:
        console.print(f"[dim]当前文章: {article.title}[/dim]")

    session_id = uuid.uuid4().hex[:8]
    user_id = "cli"

    while True:
        try:
            user_input = await asyncio.to_thread(Prompt.ask, "\n[bold green]你[/bold green]")
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]再见！[/yellow]")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            console.print("[yellow]感谢使用，再见！[/yellow]")
            break

        if not user_input.strip():
            console.print("[yellow]输入不能为空，请重新输入[/yellow]")
            continue

        result = await run_message(service, user_input, session_id, user_id, article, preferences)
        if result is not None:
            print_result(result)
        elif settings.debug_mode:
            console.print("[dim]本轮没有结果，详见日志[/dim]")


def parse_args() -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="FeedMind conversational assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  # 交互模式
  feedmind --article article.md

  # 单条消息
  feedmind --article article.md --message "Create a LinkedIn post about this"

  # 指定内容偏好
  feedmind --article article.md --platform-preferences "casual tone, no emojis"

  # 打印对话图
  feedmind --graph
        """,
    )

    parser.add_argument("--article", "-a", type=str, help="文章文件路径（纯文本或 Markdown）")
    parser.add_argument("--message", "-m", type=str, help="只发送一条消息，然后退出")
    parser.add_argument("--platform-preferences", "-p", type=str, help="社交帖子的内容偏好")
    parser.add_argument("--debug", "-d", action="store_true", help="启用调试模式")
    parser.add_argument("--graph", "-g", action="store_true", help="打印对话图的 Mermaid 描述后退出")
    parser.add_argument("--version", "-v", action="version", version=f"FeedMind v{__version__}")

    return parser.parse_args()


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    console.print("[dim]正在初始化系统...[/dim]")
    service = ChatTurnService.from_settings(settings)
    console.print("[green]✓ 系统初始化完成[/green]\n")

    if args.graph:
        console.print(Panel(generate_mermaid_graph(service.workflow), title="对话图"))
        return 0

    article = load_article(args.article)

    if args.message:
        result = await run_message(
            service, args.message, uuid.uuid4().hex[:8], "cli", article, args.platform_preferences
        )
        if result is None:
            return 1
        print_result(result)
        return 0

    await interactive_mode(service, settings, article, args.platform_preferences)
    return 0


def main() -> int:
    """主入口函数"""
    args = parse_args()

    settings = get_settings()
    if args.debug:
        settings.debug_mode = True

    setup_logger(
        log_dir=settings.log_dir,
        level=settings.log_level,
        debug=settings.debug_mode,
    )

    print_banner()

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]程序被用户中断[/yellow]")
        return 130
    except Exception as e:
        console.print(f"[red]程序异常: {e}[/red]")
        if settings.debug_mode:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
