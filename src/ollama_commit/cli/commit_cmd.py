"""Command for generating commit messages from the working tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

# --- Command Argument Annotations ---

DirectoryOpt = Annotated[
	Path | None,
	typer.Option(
		"--directory",
		"-d",
		help="Git repository to generate a commit message for (defaults to the current directory)",
		exists=True,
		file_okay=False,
		resolve_path=True,
	),
]
ModelOpt = Annotated[str | None, typer.Option("--model", "-m", help="Model to use, e.g. llama3")]
HostOpt = Annotated[str | None, typer.Option("--host", help="Ollama server URL, e.g. http://localhost:11434")]
VerboseFlag = Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed progress")]
DebugFlag = Annotated[bool, typer.Option("--debug", help="Show debug logging")]
QuietFlag = Annotated[bool, typer.Option("--quiet", "-q", help="Only show errors and the result")]
AutoStageFlag = Annotated[bool, typer.Option("--auto-stage", "-s", help="Stage all changes before generating")]
AutoModelFlag = Annotated[bool, typer.Option("--auto-model", help="Pick an installed model automatically")]
AutoCommitFlag = Annotated[
	bool, typer.Option("--auto-commit", "-c", help="Stage, commit and push without asking for the command")
]
InteractiveOpt = Annotated[
	bool | None,
	typer.Option("--interactive/--no-interactive", "-i/-n", help="Ask what to do with the message"),
]
PromptFileOpt = Annotated[str | None, typer.Option("--prompt-file", help="Custom system prompt file")]
PromptTemplateOpt = Annotated[
	str | None,
	typer.Option(
		"--prompt-template",
		"-t",
		help="Prompt template: default, conventional, simple or detailed",
	),
]


def _flag(value: bool) -> bool | None:
	"""Command-line flags can only switch a setting on; unset flags defer to the configuration."""
	return True if value else None


# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the commit command with the CLI app."""

	@app.command(name="commit")
	def commit_command(
		ctx: typer.Context,
		directory: DirectoryOpt = None,
		model: ModelOpt = None,
		host: HostOpt = None,
		verbose: VerboseFlag = False,
		debug: DebugFlag = False,
		quiet: QuietFlag = False,
		auto_stage: AutoStageFlag = False,
		auto_model: AutoModelFlag = False,
		auto_commit: AutoCommitFlag = False,
		interactive: InteractiveOpt = None,
		prompt_file: PromptFileOpt = None,
		prompt_template: PromptTemplateOpt = None,
	) -> None:
		"""
		Generate a commit message for the staged (or unstaged) changes.

		Staged changes are used when present, otherwise the unstaged diff.
		With --auto-commit the message is committed and pushed.

		"""
		_commit_command_impl(
			directory=directory or Path.cwd(),
			overrides={
				"model": model,
				"host": host,
				"verbose": _flag(verbose),
				"debug": _flag(debug),
				"quiet": _flag(quiet),
				"auto_stage": _flag(auto_stage),
				"auto_model": _flag(auto_model),
				"auto_commit": _flag(auto_commit),
				"interactive": interactive,
				"prompt_file": prompt_file,
				"prompt_template": prompt_template,
			},
			log_file_path=ctx.meta.get("log_file_path"),
		)


# --- Implementation Function ---


def _commit_command_impl(directory: Path, overrides: dict[str, object], log_file_path: Path | None) -> None:
	"""Resolve configuration, build the collaborators and run the workflow."""
	from ollama_commit.commit import CommitCommand, CommitUI
	from ollama_commit.config import ConfigManager, apply_overrides
	from ollama_commit.context import ContextService
	from ollama_commit.errors import ModelUnavailableError, TransientModelError
	from ollama_commit.git import GitService
	from ollama_commit.llm import OllamaClient
	from ollama_commit.llm.diagnostics import run_simple_prompt, troubleshooting
	from ollama_commit.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner
	from ollama_commit.utils.log_setup import log_environment_info, setup_logging

	setup_logging(
		is_verbose=bool(overrides["verbose"]),
		is_debug=bool(overrides["debug"]),
		is_quiet=bool(overrides["quiet"]),
		log_file_path=log_file_path,
	)

	try:
		manager = ConfigManager(project_dir=directory)
		config = apply_overrides(manager.get_config(), **overrides)
		setup_logging(
			is_verbose=config.verbose,
			is_debug=config.debug,
			is_quiet=config.quiet,
			log_file_path=log_file_path,
		)
		if config.debug:
			log_environment_info()

		client = OllamaClient(config.host, config.timeouts)

		logger.info("Testing connection to %s", config.host)
		with loading_spinner(f"Connecting to {config.host}...", enabled=not config.quiet):
			connected = client.test_connection()
		if not connected:
			exit_with_error(f"Failed to connect to Ollama at {config.host}\n\n{troubleshooting(config.host)}")
			return

		if config.auto_model:
			try:
				with loading_spinner("Looking for an installed model...", enabled=not config.quiet):
					selected = client.get_default_model()
			except TransientModelError as e:
				exit_with_error(f"Could not list models on {config.host}", exception=e)
				return
			if not selected:
				exit_with_error(f"No suitable model found on {config.host}. Try: ollama pull {config.model}")
				return
			logger.info("Auto-selected model: %s", selected)
			config = apply_overrides(config, model=selected)

		if config.debug:
			logger.info("Running simple prompt test...")
			try:
				run_simple_prompt(client, config.model)
			except (ModelUnavailableError, TransientModelError) as e:
				exit_with_error(
					f"Simple test failed - there may be issues with the Ollama setup. Try: ollama pull {config.model}",
					exception=e,
				)
				return
			logger.info("Simple test passed")

		ui = CommitUI(quiet=config.quiet)
		command = CommitCommand(
			config=config,
			git=GitService(directory, quiet=config.quiet),
			client=client,
			ui=ui,
			context_service=ContextService(directory),
		)
		result = command.run()
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
		return

	if result.exit_code != 0:
		raise typer.Exit(result.exit_code)
