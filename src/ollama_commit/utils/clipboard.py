"""Clipboard access through the platform's command-line tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipboardTool:
	"""A command that copies stdin to the clipboard."""

	command: tuple[str, ...]
	name: str

	def is_applicable(self) -> bool:
		"""Return True if the tool fits the current platform and is installed."""
		if self.name == "macOS" and sys.platform != "darwin":
			return False
		if self.name == "Windows" and sys.platform != "win32":
			return False
		if self.name == "Linux (Wayland)" and not os.environ.get("WAYLAND_DISPLAY"):
			return False
		if self.name.startswith("Linux (X11") and not os.environ.get("DISPLAY"):
			return False
		return shutil.which(self.command[0]) is not None


CLIPBOARD_TOOLS = (
	ClipboardTool(("pbcopy",), "macOS"),
	ClipboardTool(("wl-copy",), "Linux (Wayland)"),
	ClipboardTool(("xclip", "-selection", "clipboard"), "Linux (X11)"),
	ClipboardTool(("xsel", "--clipboard", "--input"), "Linux (X11, xsel)"),
	ClipboardTool(("clip",), "Windows"),
)


def copy_to_clipboard(text: str) -> str | None:
	"""
	Copy ``text`` to the system clipboard.

	Args:
		text: Text to copy

	Returns:
		The name of the tool that succeeded, or None if no tool worked

	"""
	if not text.strip():
		logger.warning("No text to copy to clipboard")
		return None

	for tool in CLIPBOARD_TOOLS:
		if not tool.is_applicable():
			continue
		try:
			subprocess.run(  # noqa: S603
				list(tool.command),
				input=text,
				text=True,
				capture_output=True,
				check=True,
				timeout=5,
			)
		except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
			logger.debug("Failed to use %s: %s", tool.command[0], e)
			continue
		logger.debug("Copied %d characters with %s", len(text), tool.command[0])
		return tool.name

	logger.warning("No clipboard tool found (pbcopy, wl-copy, xclip, xsel or clip)")
	return None
