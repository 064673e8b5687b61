"""Tests for autoreload.console — status lines and startup banner."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from autoreload.config import AutoreloadConfig, WatchTarget
from autoreload.console import PREFIX, describe_event, log, print_banner, warn


def _capture(fn: object, *args: object, **kwargs: object) -> str:
    buf = io.StringIO()
    with patch.object(sys, "stderr", buf):
        fn(*args, **kwargs)  # type: ignore[operator]
    return buf.getvalue()


class TestStatusLines:
    """Prefixed single-line output."""

    def test_log_prefix(self) -> None:
        output = _capture(log, "File changed, reloading client...")
        assert PREFIX in output
        assert output.rstrip().endswith("- File changed, reloading client...")

    def test_warn(self) -> None:
        output = _capture(warn, "Ignoring malformed message")
        assert PREFIX in output
        assert "Ignoring malformed message" in output

    def test_nothing_on_stdout(self, capsys: object) -> None:
        log("hello")
        captured = capsys.readouterr()  # type: ignore[attr-defined]
        assert captured.out == ""
        assert "hello" in captured.err


class TestDescribeEvent:
    """Wording of per-file log lines."""

    def test_change(self) -> None:
        assert describe_event("change", "src/a.html") == 'File "src/a.html" changed'

    def test_add(self) -> None:
        assert describe_event("add", "src/b.html") == 'File "src/b.html" added'

    def test_add_dir(self) -> None:
        assert describe_event("addDir", "src/new") == 'Dir "src/new" added'


class TestPrintBanner:
    """Tests for the startup banner."""

    def _capture_banner(self, config: AutoreloadConfig | None = None, **kwargs: object) -> str:
        config = config or AutoreloadConfig(
            paths=(WatchTarget(Path("/tmp/site/src"), events=("change", "add")),)
        )
        return _capture(print_banner, config, **kwargs)

    def test_banner_contents(self) -> None:
        output = self._capture_banner()

        assert "autoreload" in output
        assert "1 watch target" in output
        assert "/tmp/site/src (change, add)" in output
        assert "ws://127.0.0.1:1238/__autoreload" in output
        assert "/__autoreload.js" in output
        assert "Watching for changes" in output

    def test_plural_targets(self) -> None:
        config = AutoreloadConfig(paths=("a", "b"))  # type: ignore[arg-type]
        assert "2 watch targets" in self._capture_banner(config)

    def test_custom_port(self) -> None:
        config = AutoreloadConfig(port=4000, paths=("a",))  # type: ignore[arg-type]
        assert "ws://127.0.0.1:4000/__autoreload" in self._capture_banner(config)

    def test_warnings_displayed(self) -> None:
        output = self._capture_banner(warnings=["Watch path does not exist: /nope"])
        assert "Watch path does not exist: /nope" in output

    def test_version_shown(self) -> None:
        from autoreload import __version__

        assert __version__ in self._capture_banner()

    def test_no_color_respected(self) -> None:
        """When NO_COLOR is set, no ANSI escape codes should appear."""
        buf = io.StringIO()
        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            # Re-import to pick up env change
            import importlib

            import autoreload.console
            importlib.reload(autoreload.console)
            with patch.object(sys, "stderr", buf):
                autoreload.console.print_banner(AutoreloadConfig(paths=("a",)))  # type: ignore[arg-type]
                autoreload.console.log("reloading")
            # Restore original
            importlib.reload(autoreload.console)

        output = buf.getvalue()
        assert "\033[" not in output
