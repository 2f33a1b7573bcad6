import asyncio
import contextlib

from channels.generic.websocket import AsyncJsonWebsocketConsumer
from grading.services.metrics import get_metrics

EMPTY_METRICS = {
    "queued": "-",
    "compiled": "-",
    "failed": "-",
    "avg_seconds": None,
    "total_seconds": None,
    "elapsed_seconds": None,
    "reports_per_sec": None,
}


class ReportMetricsConsumer(AsyncJsonWebsocketConsumer):
    """
    Pushes report card batch counters to connected dashboards every few seconds.
    """

    interval = 3

    async def connect(self):
        await self.accept()
        self._running = True
        await self.send_metrics()
        self._task = asyncio.create_task(self._loop())

    async def disconnect(self, close_code):
        self._running = False
        if hasattr(self, "_task"):
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _loop(self):
        while self._running:
            await asyncio.sleep(self.interval)
            await self.send_metrics()

    async def send_metrics(self):
        metrics = get_metrics()
        payload = {"type": "metrics"}
        payload.update(metrics if metrics is not None else EMPTY_METRICS)
        await self.send_json(payload)
