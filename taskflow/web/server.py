"""HTTP trigger for the digest scheduler.

Exposes ``POST /worker`` (and ``GET /worker`` for cron services that only
issue GETs) so an external timer, an on-demand call, or a developer can run
a scheduler pass.  When ``CRON_SECRET`` is set the caller must send
``Authorization: Bearer <secret>``.

Runs in the worker's event loop via aiohttp's AppRunner/TCPSite.
"""

from __future__ import annotations

import hmac
import logging

from aiohttp import web

from taskflow.config import settings
from taskflow.scheduler.runner import ScheduleRunner

logger = logging.getLogger(__name__)

RUNNER_KEY = web.AppKey("runner", ScheduleRunner)


def _authorized(request: web.Request) -> bool:
    secret = settings.cron_secret
    if not secret:
        return True
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header, f"Bearer {secret}")


async def _handle_worker(request: web.Request) -> web.Response:
    """Run one scheduler pass and report its counts."""
    if not _authorized(request):
        logger.warning("Worker trigger rejected: bad authorization (%s)", request.remote)
        return web.json_response({"error": "Unauthorized"}, status=401)

    runner = request.app[RUNNER_KEY]
    try:
        summary = await runner.run()
    except Exception:
        logger.exception("Worker trigger: scheduler pass failed")
        return web.json_response({"error": "Scheduler error"}, status=500)
    return web.json_response({"ok": True, "ran": True, "summary": summary.to_dict()})


async def _health(request: web.Request) -> web.Response:
    """GET /health — basic liveness check."""
    return web.json_response({"status": "ok"})


def create_web_app(runner: ScheduleRunner) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application()
    app[RUNNER_KEY] = runner
    app.router.add_get("/health", _health)
    app.router.add_post("/worker", _handle_worker)
    app.router.add_get("/worker", _handle_worker)
    return app


class WebServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        runner: ScheduleRunner,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self._schedule_runner = runner
        self.host = host or settings.web_host
        self.port = port or settings.web_port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for trigger requests."""
        if not settings.cron_secret:
            logger.warning("CRON_SECRET empty — /worker accepts unauthenticated calls")
        app = create_web_app(self._schedule_runner)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Trigger server listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Trigger server stopped")
