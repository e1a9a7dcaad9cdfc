"""
执行上下文模块
==============

每轮对话传给所有节点的显式上下文：会话标识、进度事件出口与取消信号。

进度事件只通过 emit 发送，且 emit 永不抛出异常；
取消信号由调用方设置，节点边界和 Agent 调用都会检查它。
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from feedmind.types import EventSink, TurnCancelledError
from feedmind.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# ===== 事件名称 =====
STREAM_START = "chat:stream:start"
STREAM_TOKEN = "chat:stream:token"
STREAM_END = "chat:stream:end"
STREAM_ERROR = "chat:stream:error"


class NullEventSink:
    """丢弃所有事件，用于测试和不需要进度推送的调用方"""

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        return None


class CallbackEventSink:
    """
    把事件转发给一个回调函数

    回调可以是普通函数，也可以是协程函数（例如通过 WebSocket 推送）。
    """

    def __init__(self, callback: Callable[[str, Dict[str, Any]], Union[None, Awaitable[None]]]):
        self._callback = callback

    def emit(self, event: str, payload: Dict[str, Any]) -> Union[None, Awaitable[None]]:
        return self._callback(event, payload)


class RecordingEventSink:
    """按顺序记录所有事件"""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, dict(payload)))

    def tokens(self) -> List[str]:
        return [p.get("token", "") for e, p in self.events if e == STREAM_TOKEN]

    def names(self) -> List[str]:
        return [e for e, _ in self.events]


@dataclass
class ExecutionContext:
    """
    单轮对话的执行上下文

    属性:
        session_id: 会话 ID
        thread_id: 线程/连接 ID，用于关联同一会话的多个连接
        sink: 进度事件出口
        cancel_event: 取消信号
    """

    session_id: str
    thread_id: str = ""
    sink: EventSink = field(default_factory=NullEventSink)
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)

    async def emit(self, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        """
        发送事件

        尽力投递：出口抛出的任何异常都只记录警告。
        """
        try:
            result = self.sink.emit(event, payload or {})
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"[Emit] 事件 {event} 发送失败: {e}")

    async def emit_token(self, token: str) -> None:
        await self.emit(STREAM_TOKEN, {"session_id": self.session_id, "token": token})

    # ===== 取消 =====

    def cancel(self) -> None:
        """由调用方在放弃本轮对话时调用（例如连接断开）"""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def raise_if_cancelled(self, node: Optional[str] = None) -> None:
        if self.cancel_event.is_set():
            raise TurnCancelledError(self.session_id, node)

    async def run_cancellable(self, awaitable: Awaitable[T], node: Optional[str] = None) -> T:
        """
        执行一个可被取消的调用

        调用与取消信号竞争：取消先到时中止调用并抛出 TurnCancelledError。

        Args:
            awaitable: 待执行的协程（通常是一次 Agent 调用）
            node: 当前节点名，用于错误信息

        Returns:
            调用结果
        """
        if self.cancel_event.is_set():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise TurnCancelledError(self.session_id, node)

        call = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.cancel_event.wait())
        try:
            done, _ = await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            waiter.cancel()

        if call in done:
            return call.result()

        call.cancel()
        try:
            await call
        except asyncio.CancelledError:
            pass
        logger.info(f"[Cancel] 会话 {self.session_id} 在节点 {node} 中止了进行中的调用")
        raise TurnCancelledError(self.session_id, node)
