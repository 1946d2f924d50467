#!/usr/bin/env python3
"""Print live weather conditions from a WeatherLink Live unit.

Without ``--host`` the unit is located with mDNS. Pass ``--host`` (and
optionally ``--port``) when multicast DNS is blocked on the network.

Environment variables (``DAVIS_*``, see :class:`pydavis.DavisConfig`) supply
defaults; command line flags take precedence.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pydavis import DavisClient, DavisConfig, DavisError  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--host", help="hostname or IP address of the unit (disables mDNS discovery)")
    parser.add_argument("--port", type=int, default=0, help="HTTP port of the unit (default: 80)")
    parser.add_argument("--verbose", action="store_true", help="log engine activity at INFO level")
    parser.add_argument("--json", action="store_true", help="print the full report as JSON")
    return parser


async def _watch(args: argparse.Namespace) -> int:
    config = DavisConfig.from_env()
    if args.host:
        client = DavisClient.unmanaged(args.host, args.port, verbose=args.verbose, config=config)
    else:
        client = DavisClient.managed(verbose=args.verbose, config=config)

    async with client:
        while True:
            await client.notify.get()
            report = client.report()
            if args.json:
                print(report.canonical_json().decode("utf-8"), flush=True)
                continue
            stamp = report.timestamp.isoformat() if report.timestamp else "-"
            print(
                f"{stamp} {report.device_id} "
                f"temp={report.temperature} hum={report.humidity} "
                f"wind={report.wind_speed_last}@{report.wind_dir_last} "
                f"signal={report.rx_state} battery={report.battery_flag}",
                flush=True,
            )


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_watch(args))
    except DavisError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
