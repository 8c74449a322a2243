"""CLI entry point for the interactive loop runner."""

import asyncio
import logging
import sys
import tomllib
from pathlib import Path

from rich.logging import RichHandler

from agent_loops.errors import ConfigError

DEFAULT_CONFIG = Path("configs/default.toml")


def load_config(path: Path = DEFAULT_CONFIG) -> dict:
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")
    with open(path, "rb") as f:
        return tomllib.load(f)


def setup_logging(config: dict) -> None:
    level = config.get("logging", {}).get("level", "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def main():
    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CONFIG
    config = load_config(config_path)
    setup_logging(config)

    from agent_loops.core.agent import Agent
    from agent_loops.cli.app import AgentCLI

    agent = Agent(config)
    cli = AgentCLI(agent)
    asyncio.run(cli.run())


if __name__ == "__main__":
    main()
