#!/usr/bin/env python3
"""
Main entry point for the game builder.

Creates a project from a game description given on the command line, starts
a build and polls its status until the build completes or fails:

    python -m src.main "a sci-fi shooter on a derelict space station"
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import structlog
import typer

from src.core.app import GameBuilderApp
from src.core.errors import BuildError
from src.utils.env_config import AppSettings, get_settings
from src.utils.validators import ValidationException

logger = structlog.get_logger(__name__)


def configure_logging(settings: AppSettings) -> None:
    """Configure stdlib logging and structlog from settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json_format
        else structlog.dev.ConsoleRenderer()
    )

    # Configure structured logging
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


app = typer.Typer(
    name="game-builder",
    help="Generate a game design from a description and build it to WebGL",
    add_completion=False,
)


async def run(
    prompt: str,
    user_id: str,
    poll_interval: float,
    name: Optional[str] = None,
    category: Optional[str] = None,
    json_output: bool = False,
) -> int:
    """Create a project, build it and report status snapshots; returns the exit code."""
    builder = GameBuilderApp()
    await builder.initialize()

    def say(message: str) -> None:
        if not json_output:
            typer.echo(message)

    try:
        project = await builder.create_project_from_prompt(prompt, user_id=user_id, name=name, category=category)
        say(f"Created project {project.id}: {project.display_name} ({project.category.value})")

        build = await builder.start_build(project.id)
        say(f"Started build {build['id']} (estimated {build['estimatedTime']}s)")

        while True:
            status = await builder.get_build_status(build["id"])
            say(f"[{status['status']}] {status['progress']}%")
            if status["status"] in ("completed", "failed"):
                break
            await asyncio.sleep(poll_interval)

        typer.echo(json.dumps(status, indent=2))
        return 0 if status["status"] == "completed" else 1
    finally:
        await builder.shutdown()


@app.command()
def build(
    prompt: str = typer.Argument(..., help="Free-text description of the game"),
    user_id: str = typer.Option("local", "--user-id", help="Owner of the created project"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project name (default: generated)"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Game category (default: detected)"),
    poll_interval: float = typer.Option(1.0, "--poll-interval", help="Seconds between status polls"),
    json_output: bool = typer.Option(False, "--json", help="Print only the final status as JSON"),
):
    """Create a project from PROMPT, build it and wait for the result."""
    settings = get_settings()
    configure_logging(settings)

    try:
        exit_code = asyncio.run(run(prompt, user_id, poll_interval, name, category, json_output))
    except ValidationException as e:
        typer.echo(f"Invalid input: {e.message}", err=True)
        raise typer.Exit(code=2)
    except BuildError as e:
        logger.error("Build could not be started", **e.to_dict())
        typer.echo(f"Build could not be started: {e.message}", err=True)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        raise typer.Exit(code=130)

    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
