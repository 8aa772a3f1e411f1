"""Commands for listing and pulling models on the Ollama server."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

logger = logging.getLogger(__name__)
console = Console()

HostOpt = Annotated[str | None, typer.Option("--host", "-H", help="Ollama server URL")]

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
_KILOBYTE = 1024


def format_file_size(size: int) -> str:
	"""Format a byte count as ``1.5 GB``."""
	value = float(size)
	for unit in _SIZE_UNITS:
		if value < _KILOBYTE or unit == _SIZE_UNITS[-1]:
			return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
		value /= _KILOBYTE
	return f"{value:.1f} TB"  # pragma: no cover


def register_command(app: typer.Typer) -> None:
	"""Register the model commands with the CLI app."""

	@app.command(name="list-models")
	def list_models_command(host: HostOpt = None) -> None:
		"""List the models installed on the Ollama server."""
		from ollama_commit.config import ConfigManager, apply_overrides
		from ollama_commit.errors import TransientModelError
		from ollama_commit.llm import OllamaClient
		from ollama_commit.utils.cli_utils import exit_with_error, loading_spinner

		config = apply_overrides(ConfigManager(project_dir=Path.cwd()).get_config(), host=host)
		client = OllamaClient(config.host, config.timeouts)
		try:
			with loading_spinner(f"Fetching models from {config.host}..."):
				models = client.list_models()
		except TransientModelError as e:
			exit_with_error(f"Cannot fetch models from {config.host}", exception=e)
			return

		if not models:
			console.print("No models found")
			return

		table = Table(title=f"Models on {config.host}")
		table.add_column("Name", style="cyan")
		table.add_column("Size", justify="right")
		table.add_column("Family")
		table.add_column("Parameters")
		for info in models:
			marker = " [green](current)[/]" if info.name in {config.model, f"{config.model}:latest"} else ""
			table.add_row(
				f"{info.name}{marker}",
				format_file_size(info.size) if info.size else "n/a",
				info.details.family or "",
				info.details.parameter_size or "",
			)
		console.print(table)

	@app.command(name="pull")
	def pull_command(
		model: Annotated[str, typer.Argument(help="Model to pull, e.g. llama3")],
		host: HostOpt = None,
	) -> None:
		"""Pull a model onto the Ollama server."""
		from ollama_commit.config import ConfigManager, apply_overrides
		from ollama_commit.errors import ModelUnavailableError, TransientModelError
		from ollama_commit.llm import OllamaClient
		from ollama_commit.utils.cli_utils import exit_with_error

		config = apply_overrides(ConfigManager(project_dir=Path.cwd()).get_config(), host=host)
		client = OllamaClient(config.host, config.timeouts)
		last_status: list[str] = []

		def on_status(status: str) -> None:
			if not last_status or last_status[-1] != status:
				console.print(f"[dim]{status}[/]", highlight=False)
				last_status.append(status)

		try:
			client.pull_model(model, on_status=on_status)
		except (ModelUnavailableError, TransientModelError) as e:
			exit_with_error(f"Failed to pull model '{model}'", exception=e)
			return
		console.print(f"[green]✓[/] Model '{model}' pulled successfully")
