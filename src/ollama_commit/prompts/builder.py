"""Prompt construction for commit message generation."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from ollama_commit.prompts.templates import DEFAULT_PROMPT, get_template

if TYPE_CHECKING:
	from ollama_commit.context import ContextData

logger = logging.getLogger(__name__)

# Diffs longer than this are cut to the first MAX_DIFF_LINES lines
MAX_DIFF_CHARS = 4000
MAX_DIFF_LINES = 100
# Hard cap on the kept text when those lines are very long
MAX_KEPT_CHARS = 8000

_FILE_HEADER = re.compile(r"^diff --git ", re.MULTILINE)


def get_system_prompt(prompt_file: str | Path | None, template: str = "default") -> str:
	"""
	Resolve the system prompt.

	A non-default template always wins. With the default template an
	existing, non-empty custom prompt file is used; otherwise the default
	template text.

	Args:
		prompt_file: Path of the user's custom prompt file
		template: Name of a built-in template

	Returns:
		str: System prompt text

	"""
	if template != "default":
		return get_template(template)

	if prompt_file:
		path = Path(prompt_file).expanduser()
		try:
			content = path.read_text(encoding="utf-8")
		except FileNotFoundError:
			logger.debug("No custom prompt file at %s", path)
		except OSError as e:
			logger.warning("Could not read prompt file %s: %s", path, e)
		else:
			if content.strip():
				logger.debug("Using prompt file: %s", path)
				return content
	return DEFAULT_PROMPT


def create_prompt_file(prompt_file: str | Path, template: str = "default", *, overwrite: bool = False) -> bool:
	"""
	Write a built-in template to the custom prompt file.

	Returns:
		bool: False if the file exists and ``overwrite`` is not set

	"""
	path = Path(prompt_file).expanduser()
	if path.exists() and not overwrite:
		return False
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(get_template(template), encoding="utf-8")
	logger.info("Created prompt file at %s from template '%s'", path, template)
	return True


def truncate_diff(diff: str) -> str:
	"""
	Bound the diff included in the prompt.

	Diffs longer than ``MAX_DIFF_CHARS`` keep their first ``MAX_DIFF_LINES``
	lines followed by a marker naming the omitted lines and the number of
	files in the full diff. When those lines still exceed ``MAX_KEPT_CHARS``
	the text is cut at that many characters and the marker counts characters
	instead. A long diff with nothing to omit is returned as is.

	"""
	diff = diff.replace("\r", "")
	if len(diff) <= MAX_DIFF_CHARS:
		return diff

	lines = diff.split("\n")
	kept = "\n".join(lines[:MAX_DIFF_LINES])
	file_count = len(_FILE_HEADER.findall(diff))
	if len(kept) > MAX_KEPT_CHARS:
		marker = (
			f"[... diff truncated - showing first {MAX_KEPT_CHARS} of {len(diff)} characters "
			f"({len(lines)} total lines) ...]"
		)
		kept = kept[:MAX_KEPT_CHARS]
	elif len(lines) > MAX_DIFF_LINES:
		omitted = len(lines) - MAX_DIFF_LINES
		marker = (
			f"[... diff truncated - showing first {MAX_DIFF_LINES} lines of {len(lines)} total lines, "
			f"{omitted} lines omitted ...]"
		)
	else:
		return diff
	return f"{kept}\n\n{marker}\n[Total files changed: {file_count}]"


def format_context(context: list[ContextData]) -> str:
	"""Render gathered context as prompt sections."""
	return "\n\n".join(f"[{item.provider}]\n{item.content}" for item in context if item.content.strip())


def build_commit_prompt(
	files_info: str,
	diff: str,
	system_prompt: str,
	context: list[ContextData] | None = None,
) -> str:
	"""
	Assemble the full prompt sent to the model.

	Args:
		files_info: Per-file change summary
		diff: Raw diff text
		system_prompt: Resolved system prompt
		context: Gathered context providers, if any

	Returns:
		str: Prompt text

	"""
	sections = [system_prompt]
	context_text = format_context(context or [])
	if context_text:
		sections.append(f"ADDITIONAL CONTEXT:\n{context_text}")
	sections.append(f"CONTEXT:\n{files_info}")
	sections.append(f"GIT DIFF:\n{truncate_diff(diff)}")
	sections.append(
		"Please analyze these changes and create a meaningful commit message following the format specified above."
	)
	return "\n\n".join(sections)
