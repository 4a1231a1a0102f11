#!/usr/bin/env python3
"""Trigger a scheduler pass on a running TaskFlow worker.

Usage examples:
    # Local worker on the default port
    uv run python scripts/trigger.py

    # Remote worker
    uv run python scripts/trigger.py --url https://taskflow.example.com

The bearer token is taken from CRON_SECRET in .env unless --secret is given.
"""

import argparse
import json
import sys
from pathlib import Path

import httpx

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from taskflow.config import settings


def trigger(base_url: str, secret: str, timeout: float = 60.0) -> dict:
    """POST /worker and return the decoded response body."""
    headers = {"Authorization": f"Bearer {secret}"} if secret else {}
    resp = httpx.post(f"{base_url.rstrip('/')}/worker", headers=headers, timeout=timeout)
    if resp.status_code == 401:
        print("ERROR: unauthorized — check CRON_SECRET", file=sys.stderr)
        sys.exit(1)
    resp.raise_for_status()
    return resp.json()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a TaskFlow scheduler pass over HTTP")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{settings.web_port}",
        help="Worker base URL (default: local worker)",
    )
    parser.add_argument("--secret", default=settings.cron_secret, help="CRON_SECRET value")
    args = parser.parse_args()

    try:
        result = trigger(args.url, args.secret)
    except httpx.HTTPError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
