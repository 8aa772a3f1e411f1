"""
Logging setup for ollama-git-commit.

Console logging goes through rich; an optional log file receives every
record at DEBUG level.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console()

# Third-party loggers that stay quiet unless debugging
NOISY_LOGGERS = ("urllib3", "requests")


def resolve_log_level(*, is_verbose: bool = False, is_debug: bool = False, is_quiet: bool = False) -> int:
	"""Map the CLI flags to a log level. Debug beats verbose, quiet beats both."""
	if is_quiet:
		return logging.ERROR
	if is_debug:
		return logging.DEBUG
	if is_verbose:
		return logging.INFO
	return logging.WARNING


def setup_logging(
	is_verbose: bool = False,
	is_debug: bool = False,
	is_quiet: bool = False,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Set up logging configuration.

	Args:
	    is_verbose: Show informational messages
	    is_debug: Show debug messages with their source location
	    is_quiet: Only show errors
	    log_file_path: Optional path to a file for logging. If None, no file logging.

	"""
	log_level = resolve_log_level(is_verbose=is_verbose, is_debug=is_debug, is_quiet=is_quiet)

	root_logger = logging.getLogger()
	root_logger.setLevel(logging.DEBUG if log_file_path else log_level)

	# Clear existing handlers to avoid duplicate logs if called multiple times
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	console_handler = RichHandler(
		level=log_level,
		rich_tracebacks=True,
		show_time=is_debug,
		show_path=is_debug,
	)
	root_logger.addHandler(console_handler)

	for name in NOISY_LOGGERS:
		logging.getLogger(name).setLevel(logging.DEBUG if is_debug else logging.WARNING)

	if log_file_path:
		try:
			file_handler_path = Path(log_file_path)
			file_handler_path.parent.mkdir(parents=True, exist_ok=True)

			file_handler = logging.FileHandler(file_handler_path, mode="a", encoding="utf-8")
			file_handler.setLevel(logging.DEBUG)
			file_handler.setFormatter(
				logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s")
			)
			root_logger.addHandler(file_handler)
			root_logger.debug("Logging to file: %s", file_handler_path)
		except OSError as e:
			root_logger.setLevel(log_level)
			console.print(f"[red]Failed to set up file logging to {log_file_path}: {e}[/red]")


def log_environment_info() -> None:
	"""Log information about the execution environment."""
	import platform

	from ollama_commit import __version__

	logger = logging.getLogger(__name__)
	logger.debug("ollama-git-commit version: %s", __version__)
	logger.debug("Python version: %s", platform.python_version())
	logger.debug("Platform: %s", platform.platform())


def display_error_summary(error_message: str) -> None:
	"""
	Display an error summary with a divider and a title.

	Args:
	        error_message: The error message to display

	"""
	title = Text("Error Summary", style="bold red")

	console.print()
	console.print(Rule(title, style="red"))
	console.print(f"\n{error_message}\n", markup=False)
	console.print(Rule(style="red"))
	console.print()


def display_warning_summary(warning_message: str) -> None:
	"""
	Display a warning summary with a divider and a title.

	Args:
	        warning_message: The warning message to display

	"""
	title = Text("Warning Summary", style="bold yellow")

	console.print()
	console.print(Rule(title, style="yellow"))
	console.print(f"\n{warning_message}\n", markup=False)
	console.print(Rule(style="yellow"))
	console.print()
