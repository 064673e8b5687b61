"""Autoreload — tell connected browsers to reload when watched files change.

A small live-reload coordinator.  Watched files bump a version clock, the
new version is pushed to every connected page over a WebSocket, and pages
that reconnect after a restart reload only if they are behind.

Quick start::

    import autoreload

    autoreload.watch(paths=["src/", "templates/"])

ASGI integration (serves ``/__autoreload.js`` and runs the watcher inside
the app's lifespan)::

    app = autoreload.autoreload(app, paths=["templates/"])

Then add :data:`INCLUDE_HTML` to your pages::

    <script src="/__autoreload.js"></script>

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "INCLUDE_HTML",
    "AutoreloadConfig",
    "AutoreloadWatcher",
    "LogSettings",
    "WatchTarget",
    "__version__",
    "autoreload",
    "serve_reload",
    "watch",
]

INCLUDE_HTML = '<script src="/__autoreload.js"></script>'


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import autoreload`` fast; ``watchfiles`` and ``websockets`` are
    only imported once the watcher or server is actually used.
    """
    if name in {"AutoreloadConfig", "LogSettings", "WatchTarget"}:
        from autoreload import config

        return getattr(config, name)

    if name in {"AutoreloadWatcher", "autoreload", "serve_reload", "watch"}:
        from autoreload import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
