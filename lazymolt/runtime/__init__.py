"""Runtime wiring: config, logging, terminal, dispatcher, and event loop."""

from __future__ import annotations

from .app import ClientOptions, run_client

__all__ = ["ClientOptions", "run_client"]
