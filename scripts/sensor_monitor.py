#!/usr/bin/env python3
"""Live sensor monitor on top of a decoder MQTT feed.

Runs a :class:`pywxsensors.SensorHub` with the MQTT decoder feed enabled and
prints every snapshot broadcast (one per accepted reading), or only the
sensors whose values changed.

Broker settings come from ``WXS_MQTT_*`` environment variables; command-line
flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pywxsensors import HubConfig, SensorDisplay, SensorHub  # noqa: E402


@dataclass
class MonitorStats:
    started_at: float
    snapshots: int = 0
    last_data: dict[str, dict[str, Any]] = field(default_factory=dict)

    def changed_sensors(self, displays: list[SensorDisplay]) -> list[SensorDisplay]:
        changed: list[SensorDisplay] = []
        for display in displays:
            key = f"{display.protocol_name}:{display.id}:{display.channel_label}"
            if self.last_data.get(key) != display.data:
                changed.append(display)
            self.last_data[key] = dict(display.data)
        return changed


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print sensor snapshots produced from a decoder MQTT feed.",
    )
    parser.add_argument("--host", help="MQTT broker host (overrides WXS_MQTT_HOST).")
    parser.add_argument("--port", type=int, help="MQTT broker port (overrides WXS_MQTT_PORT).")
    parser.add_argument("--topic", help="Decoder topic (overrides WXS_MQTT_TOPIC).")
    parser.add_argument("--language", help="Locale for type names and timestamps.")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--changes-only",
        action="store_true",
        help="Only print sensors whose data changed since the previous snapshot.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _build_config(args: argparse.Namespace) -> HubConfig:
    mqtt_overrides: dict[str, Any] = {}
    if args.host:
        mqtt_overrides["host"] = args.host
    if args.port:
        mqtt_overrides["port"] = args.port
    if args.topic:
        mqtt_overrides["topic"] = args.topic

    overrides: dict[str, Any] = {"mqtt_enabled": True}
    if args.language:
        overrides["language"] = args.language
    return HubConfig.from_env(mqtt=mqtt_overrides, **overrides)


def _print_display(display: SensorDisplay) -> None:
    label = display.name or f"{display.type_name} {display.id}"
    data = json.dumps(display.data, ensure_ascii=False, sort_keys=True)
    print(f"[monitor]   {label} ({display.protocol_name} ch={display.channel_label}) {data}")


async def _run(args: argparse.Namespace) -> int:
    config = _build_config(args)
    stats = MonitorStats(started_at=time.time())
    stop = asyncio.Event()

    def on_snapshot(event: str, displays: list[SensorDisplay]) -> None:
        stats.snapshots += 1
        shown = stats.changed_sensors(displays) if args.changes_only else displays
        if not shown:
            return
        print(f"[monitor] {event} #{stats.snapshots} sensors={len(displays)}")
        for display in shown:
            _print_display(display)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    print(f"[monitor] Connecting to {config.mqtt.host}:{config.mqtt.port} topic={config.mqtt.topic}")
    async with SensorHub(config, on_snapshot=on_snapshot) as hub:
        if hub.mqtt_runtime is None:
            print("[monitor] MQTT feed failed to start", file=sys.stderr)
            return 2
        try:
            if args.duration > 0:
                await asyncio.wait_for(stop.wait(), timeout=args.duration)
            else:
                await stop.wait()
        except TimeoutError:
            print(f"[monitor] Reached --duration={args.duration}s, stopping.")

        runtime = hub.mqtt_runtime
        print("[monitor] Summary")
        print(f"[monitor]   runtime_s : {time.time() - stats.started_at:.1f}")
        print(f"[monitor]   readings  : {runtime.received if runtime else 0}")
        print(f"[monitor]   dropped   : {runtime.dropped if runtime else 0}")
        print(f"[monitor]   snapshots : {stats.snapshots}")
        print(f"[monitor]   sensors   : {len(hub.registry)}")
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(_main())
