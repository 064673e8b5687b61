"""Autoreload configuration.

AutoreloadConfig is the central configuration object, frozen after creation.
Watch targets and log toggles are their own frozen dataclasses so the whole
configuration tree is immutable once installed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from autoreload._errors import ConfigError

if TYPE_CHECKING:
    from autoreload._types import EventKind

DEFAULT_PORT = 1238
DEFAULT_SERVE_PATH = "/__autoreload.js"
EVENT_KINDS: frozenset[str] = frozenset({"change", "add", "addDir"})

# awatch() arguments owned by the watch source itself
_RESERVED_OPTIONS = frozenset({"stop_event"})


@dataclass(frozen=True, slots=True)
class WatchTarget:
    """One watched path.

    Attributes:
        path: File or directory to observe.
        events: Event kinds that advance the version clock.
        options: Keyword arguments passed through to ``watchfiles.awatch``
            (``debounce``, ``step``, ``recursive``, ``force_polling``, ...).

    """

    path: Path
    events: tuple[EventKind, ...] = ("change",)
    options: Mapping[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))

        events = (self.events,) if isinstance(self.events, str) else tuple(self.events)
        if not events:
            events = ("change",)
        unknown = [e for e in events if e not in EVENT_KINDS]
        if unknown:
            msg = (
                f"Unknown event kind(s) {', '.join(map(repr, unknown))} for {self.path}; "
                f"expected any of {', '.join(sorted(EVENT_KINDS))}"
            )
            raise ConfigError(msg)
        # Preserve order, drop duplicates
        object.__setattr__(self, "events", tuple(dict.fromkeys(events)))

        reserved = _RESERVED_OPTIONS & set(self.options)
        if reserved:
            msg = f"Watch option(s) {sorted(reserved)} are managed by autoreload"
            raise ConfigError(msg)
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def coerce(cls, value: WatchTarget | str | Path | Mapping[str, Any]) -> WatchTarget:
        """Build a WatchTarget from shorthand.

        A bare string or Path means "watch this path for changes".  A mapping
        accepts ``path`` (or ``watch_path``), ``events`` and ``options``.

        """
        if isinstance(value, WatchTarget):
            return value
        if isinstance(value, str | Path):
            return cls(path=Path(value))
        if isinstance(value, Mapping):
            path = value.get("path", value.get("watch_path"))
            if path is None:
                msg = f"Watch target {dict(value)!r} has no path"
                raise ConfigError(msg)
            return cls(
                path=Path(path),
                events=tuple(value.get("events") or ("change",)),
                options=dict(value.get("options") or {}),
            )
        msg = f"Cannot interpret {value!r} as a watch target"
        raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class LogSettings:
    """Console logging toggles.

    Attributes:
        listen: Log that the WebSocket server is listening and where.
        reload: Log a notice every time clients are told to reload.
        file: Log which file or directory triggered the reload.

    """

    listen: bool = True
    reload: bool = True
    file: bool = False


@dataclass(frozen=True, slots=True)
class AutoreloadConfig:
    """Configuration for an autoreload watcher and its asset endpoint.

    Attributes:
        port: Port the WebSocket transport listens on (0 picks a free one).
              Baked into the served client script.
        host: Bind address for the WebSocket transport.
        serve_path: Request path at which the client script is served.
        paths: Watch targets, fixed at startup.  Strings, Paths and mappings
               are coerced to :class:`WatchTarget`.
        log: Console logging toggles.

    """

    port: int = DEFAULT_PORT
    host: str = "127.0.0.1"
    serve_path: str = DEFAULT_SERVE_PATH
    paths: tuple[WatchTarget, ...] = ()
    log: LogSettings = field(default_factory=LogSettings)

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            msg = f"port must be an integer, got {self.port!r}"
            raise ConfigError(msg)
        if not 0 <= self.port < 65536:
            msg = f"port must be between 0 and 65535, got {self.port}"
            raise ConfigError(msg)
        if not self.serve_path.startswith("/"):
            msg = f"serve_path must start with '/', got {self.serve_path!r}"
            raise ConfigError(msg)

        object.__setattr__(self, "paths", coerce_targets(self.paths))

        if isinstance(self.log, Mapping):
            try:
                log = LogSettings(**self.log)
            except TypeError as exc:
                msg = f"Invalid log settings {dict(self.log)!r}: {exc}"
                raise ConfigError(msg) from exc
            object.__setattr__(self, "log", log)

    @property
    def ws_url(self) -> str:
        """URL of the transport endpoint as seen from this host."""
        return f"ws://{self.host}:{self.port}/__autoreload"


def coerce_targets(
    values: Iterable[WatchTarget | str | Path | Mapping[str, Any]] | str | Path,
) -> tuple[WatchTarget, ...]:
    """Normalize a list of watch target shorthands, preserving order."""
    if isinstance(values, str | Path):
        values = (values,)
    return tuple(WatchTarget.coerce(v) for v in values)
