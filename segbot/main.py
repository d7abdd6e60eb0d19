"""Headless console runner: open the device, log telemetry until Ctrl-C."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from PySide6.QtCore import QCoreApplication

from segbot.core.communicator import SegBotCommunicator
from segbot.core.configio import CommunicatorConfig, config_from_dict, load_config
from segbot.core.logger import APP_LOGGER, TelemetryLogger, configure_file_logging
from segbot.core.protocol import TELEMETRY_FIELDS


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SegBot co-processor communicator")
    parser.add_argument("--device", default=None, help="tty exposed by the co-processor (e.g. /dev/rpmsg0)")
    parser.add_argument("--interval-ms", type=int, default=None, help="Telemetry update interval in ms (default: 100)")
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        help="Seconds to wait for a reply line; 0 waits forever (default: 0.2)",
    )
    parser.add_argument("--config", default=None, help="Optional JSON config file")
    parser.add_argument("--log-file", default=None, help="Also write the application log to this file")
    parser.add_argument("--record", default=None, help="Directory for a telemetry.csv of every change")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log abandoned ticks and dropped commands")
    return parser


def resolve_config(args: argparse.Namespace) -> CommunicatorConfig:
    cfg = CommunicatorConfig()
    if args.config:
        cfg = config_from_dict(load_config(Path(args.config)), cfg)
    overrides = {}
    if args.device is not None:
        overrides["device"] = args.device
    if args.interval_ms is not None:
        overrides["update_interval_ms"] = args.interval_ms
    if args.read_timeout is not None:
        overrides["read_timeout_s"] = args.read_timeout if args.read_timeout > 0 else None
    return config_from_dict(overrides, cfg)


def _log_change(field: str):
    def _on_change(value: int):
        APP_LOGGER.info(f"{field} = {value}")
    return _on_change


def _log_error(message: str):
    if message:
        APP_LOGGER.error(message)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    if args.verbose:
        APP_LOGGER.setLevel(logging.DEBUG)
    if args.log_file:
        configure_file_logging(Path(args.log_file))

    cfg = resolve_config(args)
    if not cfg.device:
        APP_LOGGER.error("No device given (use --device or a config file).")
        return 2

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    communicator = SegBotCommunicator(read_timeout_s=cfg.read_timeout_s, baudrate=cfg.baudrate)
    communicator.set_update_interval(cfg.update_interval_ms)
    communicator.init()

    signals = {
        "angle": communicator.angleChanged,
        "speedLeft": communicator.speedLeftChanged,
        "speedRight": communicator.speedRightChanged,
        "distance": communicator.sensorDistanceChanged,
        "voltage": communicator.voltageChanged,
    }
    for field in TELEMETRY_FIELDS:
        signals[field].connect(_log_change(field))
    communicator.errorStringChanged.connect(_log_error)

    recorder = None
    if args.record:
        recorder = TelemetryLogger(args.record)
        communicator.poller.fieldChanged.connect(recorder.log_change)

    try:
        communicator.set_device(cfg.device)
        if not communicator.is_active:
            return 1
        # Python handlers run between poll ticks, which keep the interpreter awake.
        signal.signal(signal.SIGINT, lambda *_: app.quit())
        return app.exec()
    finally:
        communicator.close()
        if recorder is not None:
            recorder.close()


if __name__ == "__main__":
    sys.exit(main())
