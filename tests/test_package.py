"""Tests for autoreload package exports and metadata."""

import autoreload


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(autoreload.__version__, str)
        assert "0.1.0" in autoreload.__version__

    def test_free_threading_declaration(self) -> None:
        assert autoreload._Py_mod_gil == 0

    def test_all_exports_resolvable(self) -> None:
        for name in autoreload.__all__:
            getattr(autoreload, name)

    def test_include_html(self) -> None:
        assert autoreload.INCLUDE_HTML == '<script src="/__autoreload.js"></script>'

    def test_lazy_exports_are_the_real_objects(self) -> None:
        from autoreload.app import AutoreloadWatcher
        from autoreload.config import AutoreloadConfig

        assert autoreload.AutoreloadWatcher is AutoreloadWatcher
        assert autoreload.AutoreloadConfig is AutoreloadConfig

    def test_watch_stays_callable_after_watcher_import(self) -> None:
        """Importing the watch source must not shadow the watch() entry point."""
        autoreload.AutoreloadWatcher(paths=["src"])
        import autoreload.sources.watch as _watch_module  # noqa: F401

        assert callable(autoreload.watch)
        assert autoreload.watch is autoreload.app.watch

    def test_version_matches_project_metadata(self) -> None:
        import tomllib
        from pathlib import Path

        pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
        project = tomllib.loads(pyproject.read_text(encoding="utf-8"))["project"]
        assert autoreload.__version__ == project["version"]

    def test_invalid_attribute_raises(self) -> None:
        import pytest

        with pytest.raises(AttributeError, match="no attribute"):
            autoreload.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
