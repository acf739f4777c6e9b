from .app import build_backend, create_app

__all__ = ["build_backend", "create_app"]
