from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, get_args

import structlog
import uvicorn

from sourcarr.infrastructure.config import load_config
from sourcarr.infrastructure.config.schema import LogFormat, LogLevel, ResolutionPolicy
from sourcarr.infrastructure.logging.setup import configure_logging
from sourcarr.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def _provider_list(raw: str) -> list[str]:
    names = [n.strip() for n in raw.split(",") if n.strip()]
    if not names:
        raise argparse.ArgumentTypeError("expected comma-separated provider names")
    return names


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sourcarr",
        description="Serve stream source lookups over HTTP.",
    )
    parser.add_argument("--host", help="Bind host (overrides HOST env).")
    parser.add_argument("--port", type=int, help="Bind port (overrides PORT env).")
    parser.add_argument("--config", type=Path, help="Path to YAML config file.")
    parser.add_argument("--dotenv", type=Path, help="Path to .env file.")
    parser.add_argument("--log-level", choices=get_args(LogLevel))
    parser.add_argument("--log-format", choices=get_args(LogFormat))

    resolver = parser.add_argument_group("resolution")
    resolver.add_argument(
        "--policy",
        choices=get_args(ResolutionPolicy),
        help="Default policy when a request does not name one.",
    )
    resolver.add_argument(
        "--providers",
        type=_provider_list,
        help="Enabled providers in priority order, e.g. 'FlixHQ,Cuevana'.",
    )
    resolver.add_argument(
        "--cache",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Memoise identical lookups.",
    )

    return parser.parse_args(list(argv) if argv is not None else None)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat config overrides for the flags that were actually given."""
    flags = {
        "log_level": args.log_level,
        "log_format": args.log_format,
        "policy": args.policy,
        "providers": args.providers,
        "cache_enabled": args.cache,
    }
    return {key: value for key, value in flags.items() if value is not None}


def start(argv: Iterable[str] | None = None) -> None:
    """Load config once, configure logging, and serve the app with uvicorn."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )
    log_config = configure_logging(config)

    host = args.host or os.getenv("HOST", DEFAULT_HOST)
    port = args.port or int(os.getenv("PORT", str(DEFAULT_PORT)))
    log.info("server_starting", host=host, port=port, policy=config.resolver.policy)
    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
