"""Tests for the operator console script."""

import logging
import pathlib

from scripts import wordwatch_cli


class _RecordingWatcher:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started_with = None
        self.stopped = False
        _RecordingWatcher.instances.append(self)

    def start(self, path):
        self.started_with = path

    def stop(self):
        self.stopped = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.stop()


class TestSession:
    """One watch session driven by the console."""

    def test_session_reports_through_announce(self, monkeypatch, tmp_path):
        _RecordingWatcher.instances.clear()
        monkeypatch.setattr(wordwatch_cli, "DirectoryWatcher", _RecordingWatcher)
        monkeypatch.setattr("builtins.input", lambda *a: "")

        assert wordwatch_cli._run_session(str(tmp_path), 0.5) is True

        watcher = _RecordingWatcher.instances[0]
        assert watcher.kwargs == {"delay": 0.5, "on_report": wordwatch_cli._announce}
        assert watcher.started_with == str(tmp_path)
        assert watcher.stopped

    def test_announce_logs_status_line(self, caplog):
        with caplog.at_level(logging.INFO, logger="wordwatch.cli"):
            wordwatch_cli._announce(pathlib.Path("/tmp/story.json"))
        assert "Data written to 'story.json'." in caplog.text

    def test_invalid_directory_exits_nonzero(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setattr(wordwatch_cli, "_configure_logging", lambda level: None)
        assert wordwatch_cli.main([str(tmp_path / "missing")]) == 1
        assert "Directory does not exist" in capsys.readouterr().err
