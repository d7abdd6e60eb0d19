import csv
import logging

from segbot.core.logger import APP_LOGGER, TelemetryLogger, configure_file_logging


# --- TelemetryLogger Tests ---
def test_telemetry_logger(tmp_path):
    run_dir = tmp_path / "session"
    logger = TelemetryLogger(run_dir)

    assert run_dir.exists()
    assert (run_dir / "telemetry.csv").exists()

    logger.log_change("voltage", 1180, host_time_s=1000.0)
    logger.log_change("angle", -3, host_time_s=1000.25)
    logger.close()

    with open(run_dir / "telemetry.csv", "r", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert rows[0]["field"] == "voltage"
    assert rows[0]["value"] == "1180"
    assert rows[0]["t_host_ms"] == "1000000"
    assert rows[1]["t_host_ms"] == "1000250"
    assert logger.rows_written == 2


def test_telemetry_logger_appends_without_second_header(tmp_path):
    first = TelemetryLogger(tmp_path)
    first.log_change("angle", 1)
    first.close()
    second = TelemetryLogger(tmp_path)
    second.log_change("angle", 2)
    second.close()

    with open(tmp_path / "telemetry.csv", "r", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["value"] for r in rows] == ["1", "2"]


def test_telemetry_logger_after_close_is_harmless(tmp_path):
    logger = TelemetryLogger(tmp_path)
    logger.close()
    logger.close()


# --- App logger ---
def test_configure_file_logging(tmp_path):
    log_path = tmp_path / "segbot.log"
    configure_file_logging(log_path)
    configure_file_logging(log_path)
    try:
        file_handlers = [h for h in APP_LOGGER.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        APP_LOGGER.warning("channel lost")
        file_handlers[0].flush()
        assert "channel lost" in log_path.read_text(encoding="utf-8")
    finally:
        for h in list(APP_LOGGER.handlers):
            if isinstance(h, logging.FileHandler):
                APP_LOGGER.removeHandler(h)
                h.close()
