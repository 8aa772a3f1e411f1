"""Commands for checking the Ollama setup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
	from ollama_commit.config.schema import ResolvedConfig
	from ollama_commit.llm import OllamaClient

logger = logging.getLogger(__name__)
console = Console()

HostOpt = Annotated[str | None, typer.Option("--host", "-H", help="Ollama server URL")]
ModelOpt = Annotated[
	str | None, typer.Option("--model", "-m", help="Model to test (defaults to the configured model)")
]
DirectoryOpt = Annotated[
	Path | None,
	typer.Option(
		"--directory",
		"-d",
		help="Repository whose changes are used for the prompt (defaults to the current directory)",
		exists=True,
		file_okay=False,
		resolve_path=True,
	),
]


def _resolve(host: str | None, model: str | None = None) -> ResolvedConfig:
	from ollama_commit.config import ConfigManager, apply_overrides

	return apply_overrides(ConfigManager(project_dir=Path.cwd()).get_config(), host=host, model=model)


def _client(config: ResolvedConfig) -> OllamaClient:
	from ollama_commit.llm import OllamaClient

	return OllamaClient(config.host, config.timeouts)


# --- Individual checks; each exits 1 on failure ---


def _check_connection(client: OllamaClient, config: ResolvedConfig) -> None:
	from ollama_commit.llm.diagnostics import troubleshooting

	if client.test_connection():
		console.print(f"[green]✓[/] Connected to Ollama at {escape(config.host)}")
		return
	console.print(f"[red]✗[/] Cannot connect to Ollama at {escape(config.host)}")
	console.print(troubleshooting(config.host), markup=False, highlight=False)
	raise typer.Exit(1)


def _check_model(client: OllamaClient, config: ResolvedConfig) -> None:
	if not client.is_model_available(config.model):
		console.print(f"[red]✗[/] Model '{escape(config.model)}' is not available on {escape(config.host)}")
		console.print(f"Try: ollama pull {config.model}", markup=False, highlight=False)
		raise typer.Exit(1)
	console.print(f"[green]✓[/] Model '{escape(config.model)}' is available")


def _generate(client: OllamaClient, model: str, prompt: str, label: str) -> str:
	from ollama_commit.errors import ModelUnavailableError, TransientModelError
	from ollama_commit.utils.cli_utils import exit_with_error, loading_spinner

	try:
		with loading_spinner(f"Waiting for {model}..."):
			return client.generate(model, prompt)
	except (ModelUnavailableError, TransientModelError) as e:
		exit_with_error(f"{label} failed for model '{model}'", exception=e)
		raise  # exit_with_error always raises


def _commit_prompt(config: ResolvedConfig, directory: Path) -> str:
	"""Build the real commit prompt for the changes in ``directory``."""
	from ollama_commit.context import ContextService
	from ollama_commit.errors import CommandExecutionError, NoChangesSignal, RepositoryError
	from ollama_commit.git import GitService
	from ollama_commit.prompts import build_commit_prompt, get_system_prompt
	from ollama_commit.utils.cli_utils import exit_with_error

	try:
		change_set = GitService(directory).get_changes(verbose=config.verbose)
	except NoChangesSignal as e:
		exit_with_error(f"{e}. Stage some changes or pass --prompt.")
		raise
	except (RepositoryError, CommandExecutionError) as e:
		exit_with_error("Could not read the changes to build a prompt", exception=e)
		raise

	console.print(
		f"Changes ({'staged' if change_set.staged else 'unstaged'}): {change_set.stats.files} files, "
		f"+{change_set.stats.insertions} -{change_set.stats.deletions}",
		highlight=False,
	)
	context = ContextService(directory).gather(config.context, change_set.diff) if config.context else None
	system_prompt = get_system_prompt(config.prompt_file, config.prompt_template)
	return build_commit_prompt(change_set.per_file_summary, change_set.diff, system_prompt, context)


def _show_generated(message: str, model: str) -> None:
	from ollama_commit.commit import CommitUI

	CommitUI(console=console).display_message(message, model)


def register_command(app: typer.Typer) -> None:
	"""Register the test command group with the CLI app."""
	test_app = typer.Typer(help="Check the connection to Ollama and the configured model", no_args_is_help=True)
	app.add_typer(test_app, name="test")

	@test_app.command(name="connection")
	def connection_command(host: HostOpt = None) -> None:
		"""Check that the Ollama server answers."""
		config = _resolve(host)
		_check_connection(_client(config), config)

	@test_app.command(name="model")
	def model_command(
		model: Annotated[str | None, typer.Argument(help="Model to test (defaults to the configured model)")] = None,
		host: HostOpt = None,
		generate: Annotated[bool, typer.Option("--generate", "-g", help="Also run a short generation")] = False,
	) -> None:
		"""Check that a model is installed and optionally that it generates text."""
		from ollama_commit.llm.diagnostics import SIMPLE_TEST_PROMPT

		config = _resolve(host, model)
		client = _client(config)
		_check_model(client, config)
		if generate:
			reply = _generate(client, config.model, SIMPLE_TEST_PROMPT, "Generation")
			console.print(f"[green]✓[/] Model replied: {escape(reply[:200])}")

	@test_app.command(name="simple-prompt")
	def simple_prompt_command(model: ModelOpt = None, host: HostOpt = None) -> None:
		"""Ask the model for a short commit message about a sample change."""
		from ollama_commit.commit.utils import clean_commit_message
		from ollama_commit.llm.diagnostics import SAMPLE_COMMIT_PROMPT

		config = _resolve(host, model)
		reply = _generate(_client(config), config.model, SAMPLE_COMMIT_PROMPT, "Simple prompt test")
		console.print("[green]✓[/] Simple prompt test passed")
		_show_generated(clean_commit_message(reply, use_emojis=config.use_emojis) or reply, config.model)

	@test_app.command(name="prompt")
	def prompt_command(
		model: ModelOpt = None,
		host: HostOpt = None,
		directory: DirectoryOpt = None,
		prompt: Annotated[
			str | None, typer.Option("--prompt", "-p", help="Send this text instead of the commit prompt")
		] = None,
		show_prompt: Annotated[bool, typer.Option("--show-prompt", help="Print the prompt before sending it")] = False,
	) -> None:
		"""Send the commit prompt for the current changes and show the model's message."""
		from ollama_commit.commit.utils import clean_commit_message

		config = _resolve(host, model)
		text = prompt if prompt is not None else _commit_prompt(config, directory or Path.cwd())
		if show_prompt:
			console.print(text, markup=False, highlight=False)
		console.print(f"Prompt length: {len(text)} characters", highlight=False)

		reply = _generate(_client(config), config.model, text, "Prompt test")
		message = clean_commit_message(reply, use_emojis=config.use_emojis)
		if not message:
			console.print("[red]✗[/] The model's reply was empty after cleaning")
			raise typer.Exit(1)
		_show_generated(message, config.model)
		console.print("[green]✓[/] Prompt test completed successfully")

	@test_app.command(name="all")
	def all_command(model: ModelOpt = None, host: HostOpt = None) -> None:
		"""Check the connection, the model and a simple prompt."""
		from ollama_commit.llm.diagnostics import SAMPLE_COMMIT_PROMPT

		config = _resolve(host, model)
		client = _client(config)
		_check_connection(client, config)
		_check_model(client, config)
		_generate(client, config.model, SAMPLE_COMMIT_PROMPT, "Simple prompt test")
		console.print("[green]✓[/] Simple prompt test passed")
		console.print("[bold green]All tests passed![/]")

	@test_app.command(name="full-workflow")
	def full_workflow_command(model: ModelOpt = None, host: HostOpt = None, directory: DirectoryOpt = None) -> None:
		"""Check the connection and the model, then generate a message for the current changes."""
		from ollama_commit.commit.utils import clean_commit_message

		config = _resolve(host, model)
		client = _client(config)
		_check_connection(client, config)
		_check_model(client, config)
		text = _commit_prompt(config, directory or Path.cwd())
		reply = _generate(client, config.model, text, "Commit message generation")
		message = clean_commit_message(reply, use_emojis=config.use_emojis)
		if not message:
			console.print("[red]✗[/] The model's reply was empty after cleaning")
			raise typer.Exit(1)
		_show_generated(message, config.model)
		console.print("[bold green]Full workflow test completed successfully[/]")

	@test_app.command(name="benchmark")
	def benchmark_command(
		model: ModelOpt = None,
		host: HostOpt = None,
		runs: Annotated[int, typer.Option("--runs", "-r", min=1, help="Number of generations to time")] = 3,
	) -> None:
		"""Time several generations with the model."""
		from ollama_commit.errors import ModelUnavailableError, TransientModelError
		from ollama_commit.llm.diagnostics import run_benchmark
		from ollama_commit.utils.cli_utils import exit_with_error, loading_spinner

		config = _resolve(host, model)
		try:
			with loading_spinner(f"Running {runs} generation(s) with {config.model}..."):
				result = run_benchmark(_client(config), config.model, runs)
		except (ModelUnavailableError, TransientModelError) as e:
			exit_with_error(f"Benchmark failed for model '{config.model}'", exception=e)
			return

		table = Table(title=f"Benchmark: {config.model}")
		table.add_column("Run", justify="right")
		table.add_column("Duration", justify="right")
		for index, duration in enumerate(result.durations_ms, start=1):
			table.add_row(str(index), f"{duration:.0f} ms")
		console.print(table)
		console.print(
			f"Average: {result.average_ms:.0f} ms "
			f"(fastest {result.fastest_ms:.0f} ms, slowest {result.slowest_ms:.0f} ms)",
			highlight=False,
		)
