import json

from segbot.core.configio import CommunicatorConfig, config_from_dict, load_config


def test_config_load(tmp_path):
    cfg_path = tmp_path / "segbot.json"
    cfg_path.write_text(json.dumps({"device": "/dev/rpmsg0", "update_interval_ms": 50}), encoding="utf-8")

    loaded = load_config(cfg_path)
    assert loaded == {"device": "/dev/rpmsg0", "update_interval_ms": 50}

    cfg = config_from_dict(loaded)
    assert cfg.device == "/dev/rpmsg0"
    assert cfg.update_interval_ms == 50
    assert cfg.read_timeout_s == 0.2


def test_load_nonexistent_config(tmp_path):
    assert load_config(tmp_path / "nope.json") is None


def test_load_non_object_config(tmp_path):
    cfg_path = tmp_path / "list.json"
    cfg_path.write_text("[1, 2]", encoding="utf-8")
    assert load_config(cfg_path) is None


def test_config_from_dict_clamps_and_ignores_unknown():
    cfg = config_from_dict({"update_interval_ms": 0, "colour": "red", "read_timeout_s": None})
    assert cfg.update_interval_ms == 1
    assert cfg.read_timeout_s is None
    assert not hasattr(cfg, "colour")


def test_config_overlay_keeps_base():
    base = CommunicatorConfig(device="/dev/rpmsg1", baudrate=9600)
    cfg = config_from_dict({"update_interval_ms": 20}, base)
    assert cfg.device == "/dev/rpmsg1"
    assert cfg.baudrate == 9600
    assert cfg.update_interval_ms == 20
    assert config_from_dict(None) == CommunicatorConfig()
