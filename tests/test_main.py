import logging

import main


def test_bad_settings_are_logged_failure(monkeypatch, caplog):
    monkeypatch.setattr("sys.argv", ["main.py"])
    monkeypatch.setenv("FETCH_TIMEOUT_MS", "soon")

    with caplog.at_level(logging.ERROR):
        assert main.main() == 1
    assert "FETCH_TIMEOUT_MS" in caplog.text


def test_missing_spreadsheet_id_is_logged_failure(monkeypatch, caplog):
    monkeypatch.setattr("sys.argv", ["main.py"])
    monkeypatch.delenv("FETCH_TIMEOUT_MS", raising=False)
    monkeypatch.setenv("SPREADSHEET_ID", "")

    with caplog.at_level(logging.ERROR):
        assert main.main() == 1
    assert "SPREADSHEET_ID" in caplog.text
