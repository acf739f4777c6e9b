from __future__ import annotations

from tasklist.config import load_config

from .app import create_app

app = create_app(load_config())
