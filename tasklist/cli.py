from __future__ import annotations

import argparse
import dataclasses
import os

from tasklist.config import AppConfig, load_config


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    changes: dict[str, object] = {}
    if args.host:
        changes["host"] = args.host
    if args.port is not None:
        changes["port"] = args.port
    if args.backend:
        changes["session_backend"] = args.backend
    if args.redis_url:
        changes["redis_url"] = args.redis_url
    return dataclasses.replace(cfg, **changes) if changes else cfg


def serve(cfg: AppConfig, *, log_level: str = "info") -> None:
    """Run the web app under uvicorn until interrupted."""
    import uvicorn

    from tasklist.web.app import create_app

    app = create_app(cfg)
    server = uvicorn.Server(
        uvicorn.Config(app, host=cfg.host, port=cfg.port, log_level=log_level, log_config=None)
    )
    server.run()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser("tasklist")
    sub = parser.add_subparsers(dest="cmd")

    p_serve = sub.add_parser("serve", help="Serve the task list page")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument("--backend", choices=["memory", "redis"])
    p_serve.add_argument("--redis-url")
    p_serve.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=(os.getenv("LOG_LEVEL") or "info").lower(),
    )

    sub.add_parser("config", help="Print the effective configuration")

    args = parser.parse_args(argv)
    cmd = str(getattr(args, "cmd", None) or "serve")

    if cmd == "serve":
        if not hasattr(args, "host"):
            # bare `tasklist` behaves like `tasklist serve`
            args = p_serve.parse_args([])
        serve(_apply_overrides(load_config(), args), log_level=args.log_level)
        return

    if cmd == "config":
        cfg = load_config()
        for field in dataclasses.fields(cfg):
            print(f"{field.name}={getattr(cfg, field.name)}")
        return

    parser.print_help()


if __name__ == "__main__":
    main()
