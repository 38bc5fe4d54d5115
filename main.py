"""
Adapter entry point.

Serves the protocol over stdio by default, or over HTTP when a port is
configured.
"""
import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Sequence

import uvicorn

from backends import LocalToolExecutor, PydanticAIInvoker, SimulatedInvoker
from config import VERSION, Config, load_config, merge_configs
from core import AdapterContext, ModelInvoker
from server import create_app, serve_stdio, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acp-adapter",
        description="Agent Client Protocol adapter with multi-model dispatch",
    )
    parser.add_argument("-d", "--working-directory", help="Working directory for new sessions")
    parser.add_argument("--permission-mode", choices=["safe", "yolo"], help="Default safety mode")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("-p", "--port", type=int, help="Serve HTTP on this port instead of stdio")
    parser.add_argument("--host", help="HTTP bind address")
    parser.add_argument("--config", type=Path, help="Config file to use instead of the project config")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a new Config with the command-line flags applied on top."""
    overrides: dict[str, Any] = {}
    if args.working_directory:
        overrides["working_directory"] = str(Path(args.working_directory).resolve())
    if args.permission_mode:
        overrides["permission_mode"] = args.permission_mode
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.port is not None:
        overrides.setdefault("server", {})["port"] = args.port
    if args.host:
        overrides.setdefault("server", {})["host"] = args.host

    if not overrides:
        return config
    return Config.model_validate(merge_configs(config.model_dump(), overrides))


def create_invoker(config: Config) -> ModelInvoker:
    if config.models.invoker == "pydantic_ai":
        return PydanticAIInvoker()
    return SimulatedInvoker()


def create_context(config: Config) -> AdapterContext:
    """Build the adapter context with the local tool executor and configured invoker."""
    executor = LocalToolExecutor(
        working_directory=config.working_directory,
        shell_timeout=config.tools.shell_timeout_seconds,
    )
    return AdapterContext.from_config(config, executor=executor, invoker=create_invoker(config))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_cli_overrides(load_config(config_path=args.config), args)

    setup_logging(config.log_level)
    context = create_context(config)

    logger.info("Starting adapter %s", VERSION)
    logger.info("Working directory: %s", config.working_directory or Path.cwd())
    logger.info("Model invoker: %s", config.models.invoker)

    if config.server.port is not None:
        logger.info("Server listening on %s:%d", config.server.host, config.server.port)
        uvicorn.run(create_app(context), host=config.server.host, port=config.server.port)
    else:
        try:
            asyncio.run(serve_stdio(context))
        except KeyboardInterrupt:
            logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
