from __future__ import annotations

from typing import List, Optional, Union
import argparse
import logging
import sys

import requests

from app.client.api_client import ApiClientError, RemoteSummary, SummaryNotesClient
from app.client.local_history import JsonFileStorage, LocalHistoryEntry, LocalHistoryStore
from app.client.workflow import browse_history, summarize_and_store
from app.config import Settings


def _print_item(item: Union[RemoteSummary, LocalHistoryEntry]) -> None:
    print(f"[{item.created_at}] {item.id or 'local'}")
    print(f"  summary:  {item.summary}")
    print(f"  original: {item.original_text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="summary-notes", description="Summary Notes")
    parser.add_argument("--api", default=None, help="Backend base URL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the backend server")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev only)")

    p_sum = sub.add_parser("summarize", help="Summarize text ('-' reads stdin)")
    p_sum.add_argument("text")
    p_sum.add_argument("--save", action="store_true", help="Also save the summary")

    p_hist = sub.add_parser("history", help="Browse saved summaries")
    p_hist.add_argument("--q", default=None)
    p_hist.add_argument("--take", type=int, default=None)
    p_hist.add_argument("--cursor", default=None)
    p_hist.add_argument("--direction", choices=["next", "prev"], default="next")

    p_local = sub.add_parser("local", help="Local history")
    p_local.add_argument("action", choices=["list", "clear"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")

    if args.command == "serve":
        from app.main import serve

        serve(args.host, args.port, args.reload)
        return 0

    store = LocalHistoryStore(JsonFileStorage(settings.local_history_path))
    client = SummaryNotesClient(args.api or settings.api_base_url)

    if args.command == "summarize":
        text = sys.stdin.read() if args.text == "-" else args.text
        try:
            entry: LocalHistoryEntry = summarize_and_store(client, store, text, save=args.save)
        except ApiClientError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            return 1
        except requests.RequestException as exc:
            print(f"error: backend unreachable: {exc}", file=sys.stderr)
            return 1
        print(entry.summary)
        if entry.id:
            print(f"saved as {entry.id}")
        return 0

    if args.command == "history":
        view = browse_history(client, store, q=args.q, take=args.take, cursor=args.cursor, direction=args.direction)
        if view.degraded:
            print("Showing local data (DB unavailable)")
        if not view.items:
            print("No summaries found.")
        for item in view.items:
            _print_item(item)
        if view.has_next and view.next_cursor:
            print(f"next: --cursor {view.next_cursor}")
        if view.has_prev and view.prev_cursor:
            print(f"prev: --cursor {view.prev_cursor} --direction prev")
        return 0

    if args.action == "clear":
        store.clear()
        print("Local history cleared.")
        return 0
    items = store.load()
    if not items:
        print("No local summaries found.")
    for item in items:
        _print_item(item)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
