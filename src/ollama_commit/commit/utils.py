"""Utility functions for commit message post-processing."""

from __future__ import annotations

import re

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")
_EMOJI = re.compile(
	"["
	"\U0001f000-\U0001faff"  # pictographs, emoticons, transport, symbols and pictographs extended
	"\U00002600-\U000027bf"  # misc symbols, dingbats
	"\U00002b00-\U00002bff"  # arrows and stars
	"\u200d"  # zero width joiner
	"\ufe0f"  # variation selector-16
	"\u20e3"  # combining keycap
	"]+[ \t]*",
)
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)


def remove_emojis(text: str) -> str:
	"""Strip emoji characters and the spaces that followed them, keeping indentation."""
	return _TRAILING_SPACE.sub("", _EMOJI.sub("", text))


def clean_commit_message(message: str, *, use_emojis: bool = False) -> str:
	"""
	Clean raw model output into a commit message.

	Removes ``<think>`` blocks and markdown code fences, strips emojis
	unless ``use_emojis`` is set, trims trailing whitespace on every line
	and collapses runs of blank lines.

	Args:
	    message: Raw model output
	    use_emojis: Keep emoji characters

	Returns:
	    The cleaned commit message

	"""
	cleaned = _THINK_BLOCK.sub("", message)
	cleaned = _CODE_FENCE.sub("", cleaned)
	if not use_emojis:
		cleaned = remove_emojis(cleaned)
	cleaned = "\n".join(line.rstrip() for line in cleaned.splitlines())
	cleaned = _BLANK_RUNS.sub("\n\n", cleaned)
	return cleaned.strip()


def escape_double_quotes(message: str) -> str:
	"""Escape a message for use inside a double-quoted shell argument."""
	return re.sub(r'(["\\$`])', r"\\\1", message)


def build_commit_command(message: str) -> str:
	"""Return the ``git commit`` command a user can paste to commit ``message``."""
	return f'git commit -m "{escape_double_quotes(message)}"'
