"""TaskFlow digest worker entry point.

Usage:
    python -m taskflow.main worker            # periodic passes + HTTP trigger
    python -m taskflow.main run-once          # one pass, then exit
    python -m taskflow.main preview --user ID # print a user's digest
    python -m taskflow.main send-test --user ID
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal

from taskflow.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


def _build_runner():  # noqa: ANN202
    """Wire the stores and mail sender into a ScheduleRunner."""
    from taskflow.mail.sender import MailSender
    from taskflow.scheduler.runner import ScheduleRunner
    from taskflow.scheduler.store import ScheduleStore
    from taskflow.tracker.store import TrackerStore

    sender = MailSender()
    logger.info("Mail transport: %s", sender.provider)
    runner = ScheduleRunner(
        schedules=ScheduleStore.get(),
        tracker=TrackerStore.get(),
        sender=sender,
    )
    return runner, sender


def _build_digest_service():  # noqa: ANN202
    from taskflow.digest.service import DigestService
    from taskflow.mail.sender import MailSender
    from taskflow.scheduler.store import ScheduleStore
    from taskflow.tracker.store import TrackerStore

    sender = MailSender()
    service = DigestService(
        tracker=TrackerStore.get(),
        schedules=ScheduleStore.get(),
        sender=sender,
    )
    return service, sender


async def run_worker() -> None:
    """Start the interval scheduler and the trigger server; run until signalled."""
    from taskflow.scheduler.engine import SchedulerEngine
    from taskflow.web.server import WebServer

    runner, sender = _build_runner()
    engine = SchedulerEngine(runner)
    server = WebServer(runner)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await engine.start()
    await server.start()
    logger.info("TaskFlow worker started (Ctrl+C to stop)")
    try:
        await stop.wait()
    finally:
        logger.info("Shutting down worker...")
        await server.stop()
        await engine.stop()
        await sender.close()


async def run_once() -> dict:
    runner, sender = _build_runner()
    try:
        summary = await runner.run()
    finally:
        await sender.close()
    return summary.to_dict()


async def _preview(user_id: str) -> dict:
    service, sender = _build_digest_service()
    try:
        content = await service.preview(user_id)
    finally:
        await sender.close()
    return {
        "subject": content.subject,
        "bodyText": content.body_text,
        "bodyHtml": content.body_html,
        "taskCount": content.task_count,
    }


async def _send_test(user_id: str) -> dict:
    service, sender = _build_digest_service()
    try:
        record = await service.send_test(user_id)
    finally:
        await sender.close()
    return {"ok": True, "to": record.to, "provider": record.provider, "logId": record.log_id}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="TaskFlow email digest worker")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("worker", help="Run the periodic scheduler and HTTP trigger (default)")
    sub.add_parser("run-once", help="Run a single scheduler pass and exit")
    for name in ("preview", "send-test"):
        cmd = sub.add_parser(name, help=f"{name.replace('-', ' ').capitalize()} a user's digest")
        cmd.add_argument("--user", required=True, help="User ID")
    args = parser.parse_args(argv)

    if args.command in (None, "worker"):
        asyncio.run(run_worker())
    elif args.command == "run-once":
        print(json.dumps(asyncio.run(run_once()), indent=2))
    elif args.command == "preview":
        result = asyncio.run(_preview(args.user))
        print(result["subject"])
        print()
        print(result["bodyText"])
    else:
        print(json.dumps(asyncio.run(_send_test(args.user)), indent=2))


if __name__ == "__main__":
    main()
