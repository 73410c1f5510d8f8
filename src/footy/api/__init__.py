"""HTTP API."""

from footy.api.server import create_app, run_server

__all__ = ["create_app", "run_server"]
