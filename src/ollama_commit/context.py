"""Context providers that add repository information to the prompt."""

from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ollama_commit.errors import CommandExecutionError
from ollama_commit.git.utils import run_git_command

if TYPE_CHECKING:
	from collections.abc import Callable

	from ollama_commit.config.schema import ContextProviderSpec

logger = logging.getLogger(__name__)

COMMON_DOCS = ("README.md", "README.rst", "README.txt", "CHANGELOG.md", "CONTRIBUTING.md", "LICENSE")
SOURCE_EXTENSIONS = frozenset({".py", ".js", ".ts", ".java", ".go", ".rs", ".rb", ".c", ".cpp", ".h"})
SKIPPED_DIRS = frozenset({"node_modules", "__pycache__", "venv", "dist", "build"})
MAX_FOLDER_DEPTH = 3
MAX_FOLDERS = 20
MAX_DOCS = 10


@dataclass(frozen=True)
class ContextData:
	"""Output of one context provider."""

	provider: str
	content: str
	metadata: dict[str, Any] = field(default_factory=dict)


def _is_skipped(name: str) -> bool:
	return name.startswith(".") or name in SKIPPED_DIRS


class ContextService:
	"""Gathers the enabled context providers for a repository."""

	def __init__(self, directory: Path) -> None:
		"""Initialize the service for ``directory``."""
		self.directory = directory
		self._providers: dict[str, Callable[[str], ContextData | None]] = {
			"code": self._code_context,
			"docs": self._docs_context,
			"diff": self._diff_context,
			"terminal": self._terminal_context,
			"folder": self._folder_context,
			"codebase": self._codebase_context,
		}

	def gather(self, providers: list[ContextProviderSpec], diff: str = "") -> list[ContextData]:
		"""
		Run every enabled provider.

		A provider that fails is skipped with a warning.

		Args:
			providers: Configured providers
			diff: Diff of the current change set

		Returns:
			list[ContextData]: Results in configuration order

		"""
		results: list[ContextData] = []
		for spec in providers:
			if not spec.enabled:
				continue
			try:
				data = self._providers[spec.provider](diff)
			except (OSError, CommandExecutionError) as e:
				logger.warning("Failed to gather context from %s: %s", spec.provider, e)
				continue
			if data is not None:
				logger.debug("Gathered %s context (%d chars)", spec.provider, len(data.content))
				results.append(data)
		return results

	def _code_context(self, _diff: str) -> ContextData:
		output = run_git_command(["git", "diff", "--name-only", "HEAD"], cwd=self.directory)
		files = [line for line in output.splitlines() if line.strip()]
		listing = "\n".join(f"File: {name}" for name in files)
		return ContextData("code", f"Changed Files:\n{listing}", {"file_count": len(files)})

	def _docs_context(self, _diff: str) -> ContextData:
		docs = [name for name in COMMON_DOCS if (self.directory / name).is_file()][:MAX_DOCS]
		listing = "\n".join(f"Doc: {name}" for name in docs)
		return ContextData("docs", f"Documentation Files:\n{listing}", {"doc_count": len(docs)})

	def _diff_context(self, diff: str) -> ContextData | None:
		if not diff:
			return None
		lines = diff.splitlines()
		additions = sum(1 for line in lines if line.startswith("+") and not line.startswith("+++"))
		deletions = sum(1 for line in lines if line.startswith("-") and not line.startswith("---"))
		files = sum(1 for line in lines if line.startswith("diff --git "))
		content = f"Diff Analysis:\nFiles changed: {files}\nLines added: {additions}\nLines removed: {deletions}"
		return ContextData("diff", content, {"lines_changed": len(lines)})

	def _terminal_context(self, _diff: str) -> ContextData:
		shell = os.environ.get("SHELL") or os.environ.get("COMSPEC") or "unknown"
		try:
			user = getpass.getuser()
		except (KeyError, OSError):
			user = "unknown"
		content = f"Shell Context:\nCurrent directory: {self.directory.resolve()}\nUser: {user}\nShell: {shell}"
		return ContextData("terminal", content)

	def _folder_context(self, _diff: str) -> ContextData:
		folders: list[str] = []

		def walk(path: Path, depth: int) -> None:
			if depth >= MAX_FOLDER_DEPTH or len(folders) >= MAX_FOLDERS:
				return
			for entry in sorted(path.iterdir()):
				if entry.is_dir() and not _is_skipped(entry.name):
					folders.append(str(entry.relative_to(self.directory)))
					walk(entry, depth + 1)

		walk(self.directory, 0)
		structure = "\n".join(folders[:MAX_FOLDERS])
		return ContextData("folder", f"Project Structure:\n{structure}", {"directory": str(self.directory)})

	def _codebase_context(self, _diff: str) -> ContextData:
		file_count = 0
		line_count = 0
		for root, dirs, files in os.walk(self.directory):
			dirs[:] = [name for name in dirs if not _is_skipped(name)]
			for name in files:
				if Path(name).suffix not in SOURCE_EXTENSIONS:
					continue
				file_count += 1
				try:
					with (Path(root) / name).open(encoding="utf-8", errors="ignore") as handle:
						line_count += sum(1 for _ in handle)
				except OSError:
					logger.debug("Skipping unreadable file %s", name)
		content = f"Codebase Overview:\nFiles: {file_count}\nLines of code: {line_count}"
		return ContextData("codebase", content, {"files": file_count, "lines": line_count})
