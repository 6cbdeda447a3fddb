#!/usr/bin/env python3
"""Terminal dashboard for the visitor monitoring feed.

Connects to the Socket.IO event server, loads the bootstrap snapshot and redraws a
plain-text table on every change.  Rings the terminal bell when a new
visitor appears.

Configuration comes from ``VISITORS_*`` environment variables; command line
flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyvisitors import ConsoleClient, ConsoleConfig, EntityRow, VisitorsError, build_rows  # noqa: E402
from pyvisitors.state.store import Snapshot  # noqa: E402

_LOG = logging.getLogger("watch_console")

_COLUMNS = ("#", "ID", "Name", "New Data", "Page", "Status", "Flag")


def _format_row(row: EntityRow) -> tuple[str, ...]:
    return (
        str(row.index),
        row.display_id,
        row.display_name or "",
        "Yes" if row.has_unseen_update else "No",
        row.page,
        row.status,
        "*" if row.flagged else "",
    )


def render(snapshot: Snapshot) -> str:
    cells = [_COLUMNS, *(_format_row(row) for row in build_rows(snapshot))]
    widths = [max(len(line[i]) for line in cells) for i in range(len(_COLUMNS))]
    lines = ["  ".join(value.ljust(widths[i]) for i, value in enumerate(line)) for line in cells]
    lines.insert(1, "  ".join("-" * w for w in widths))
    return "\n".join(lines)


def _redraw(snapshot: Snapshot) -> None:
    sys.stdout.write("\x1b[2J\x1b[H")
    sys.stdout.write(render(snapshot))
    sys.stdout.write("\n")
    sys.stdout.flush()


def _bell(key: str, category: str) -> None:
    _LOG.info("New visitor %s (%s)", key, category)
    sys.stdout.write("\a")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--server-url", help="Event server base URL")
    parser.add_argument("--socketio-path", help="Socket.IO endpoint path on the server")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


async def _run(config: ConsoleConfig) -> None:
    async with ConsoleClient(config, on_new_entity=_bell, on_change=_redraw) as client:
        await client.connect()
        await client.listen()
        _LOG.warning("Event channel closed; last known state kept")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    overrides: dict[str, str] = {}
    if args.server_url:
        overrides["server_url"] = args.server_url
    if args.socketio_path:
        overrides["socketio_path"] = args.socketio_path
    config = ConsoleConfig.from_env(**overrides)

    try:
        asyncio.run(_run(config))
    except KeyboardInterrupt:
        return 130
    except VisitorsError as exc:
        _LOG.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
