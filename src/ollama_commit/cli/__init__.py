"""Command-line interface package for ollama-git-commit."""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from ollama_commit import __version__
from ollama_commit.utils.log_setup import setup_logging

from .commit_cmd import register_command as register_commit_command
from .config_cmd import register_command as register_config_command
from .models_cmd import register_command as register_models_command
from .test_cmd import register_command as register_test_command

logger = logging.getLogger(__name__)

# .env.local wins over .env; neither overrides variables already set
for env_file in (Path(".env.local"), Path(".env")):
	if env_file.exists():
		load_dotenv(dotenv_path=env_file)
		logger.debug("Loaded environment variables from %s", env_file)

app = typer.Typer(
	help=f"Ollama Git Commit - commit messages generated by your local Ollama models\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)

# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"ollama-git-commit version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/ollama-git-commit_{datetime}.log.",
		),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	log_file_path: Path | None = None
	if is_output_log:
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path = Path("logs") / f"ollama-git-commit_{current_time}.log"

	ctx.meta["log_file_path"] = log_file_path
	setup_logging(log_file_path=log_file_path)


# --- Register commands ---

register_commit_command(app)
register_config_command(app)
register_models_command(app)
register_test_command(app)


# --- Main Entry Point ---
def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
