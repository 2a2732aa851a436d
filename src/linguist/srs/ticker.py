from __future__ import annotations

import asyncio
from typing import Optional

from ..clock import Clock
from ..logging import logger
from ..models.notification import TickResult
from .notifier import NotifierGate


class ReviewTicker:
    """Drive the Notifier Gate on a fixed period from the event loop.

    tick 本体は同期処理なので、同じイベントループ上の他の状態更新と
    重なることはない。1 回の tick は完了してから次の待機に入る。
    """

    def __init__(self, gate: NotifierGate, clock: Clock, interval_seconds: float) -> None:
        self._gate = gate
        self._clock = clock
        self._interval = max(0.01, float(interval_seconds))
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> Optional[TickResult]:
        try:
            return self._gate.tick(self._clock.now())
        except Exception as exc:
            # 1 回の失敗で定期チェック全体を止めない
            logger.error("review_tick_failed", error_type=type(exc).__name__, error=str(exc)[:200])
            return None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="review-ticker")
        logger.info("review_ticker_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("review_ticker_stopped")
