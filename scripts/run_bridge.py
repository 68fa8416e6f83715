#!/usr/bin/env python3
"""Run the Charge Amps bridge against the live API with an in-memory state tree.

Credentials come from the environment:
- CHARGEAMPS_EMAIL
- CHARGEAMPS_PASSWORD
- CHARGEAMPS_API_KEY
- CHARGEAMPS_INTERVAL (optional, seconds, floored to 15)

Default behavior: log in, build the state tree, poll until interrupted.
With ``--once``: log in, run the startup settings pass and one refresh,
print the resulting state tree as JSON and exit.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pychargeamps import ChargeAmpsAdapter, ChargeAmpsConfig, ChargeAmpsConfigError, InMemoryStateStore  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--once", action="store_true", help="refresh once, print the state tree and exit")
    parser.add_argument("--interval", type=float, default=None, help="polling interval in seconds")
    parser.add_argument("--namespace", default=None, help="state id prefix (default: chargeamps.0)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable DEBUG logging (secrets redacted)")
    return parser.parse_args(argv)


async def _dump_tree(store: InMemoryStateStore) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    for state_id in store.ids():
        state = await store.get_state(state_id)
        if state is not None:
            tree[state_id] = state.val
    return tree


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.interval is not None:
        overrides["interval"] = args.interval
    if args.namespace is not None:
        overrides["namespace"] = args.namespace
    try:
        config = ChargeAmpsConfig.from_env(**overrides)
    except ChargeAmpsConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    if not (config.email and config.password and config.api_key):
        print("CHARGEAMPS_EMAIL, CHARGEAMPS_PASSWORD and CHARGEAMPS_API_KEY must be set", file=sys.stderr)
        return 2

    store = InMemoryStateStore(config.namespace)
    adapter = ChargeAmpsAdapter(config, store)

    if args.once:
        try:
            if not await adapter.prepare():
                return 1
            await adapter.sync.load_settings()
            await adapter.sync.tick()
            print(json.dumps(await _dump_tree(store), indent=2, sort_keys=True, default=str))
        finally:
            await adapter.on_unload(lambda: None)
        return 0

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with adapter:
        if not adapter.client.authenticated:
            return 1
        await stop.wait()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
