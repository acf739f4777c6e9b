"""Session-scoped task list served as a web page."""

__version__ = "0.1.0"
