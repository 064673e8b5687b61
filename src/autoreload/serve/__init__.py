"""Serving layer — the client script endpoint."""

from autoreload.serve.asset import (
    PORT_PLACEHOLDER,
    AutoreloadAssetMiddleware,
    load_client_script,
)

__all__ = [
    "PORT_PLACEHOLDER",
    "AutoreloadAssetMiddleware",
    "load_client_script",
]
