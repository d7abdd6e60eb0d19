"""Basic smoke tests for the console runner."""

import json

import segbot.main as segbot_main


def test_import_main():
    assert segbot_main.main is not None


def test_cli_overrides_config_file(tmp_path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(json.dumps({"device": "/dev/rpmsg1", "update_interval_ms": 50}), encoding="utf-8")
    args = segbot_main.build_arg_parser().parse_args(
        ["--config", str(cfg_path), "--interval-ms", "20", "--read-timeout", "0"]
    )
    cfg = segbot_main.resolve_config(args)
    assert cfg.device == "/dev/rpmsg1"
    assert cfg.update_interval_ms == 20
    assert cfg.read_timeout_s is None


def test_main_without_device_fails():
    assert segbot_main.main([]) == 2


def test_main_with_missing_device_fails(tmp_path):
    assert segbot_main.main(["--device", str(tmp_path / "rpmsg9")]) == 1
