"""Collaborator interfaces consumed by the commit orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
	from ollama_commit.git.utils import ChangeSet


class ChangeSetProvider(Protocol):
	"""Source of the working-tree change set and the commit side effects."""

	def get_changes(self, *, verbose: bool = False) -> ChangeSet:
		"""
		Return staged changes, or unstaged changes when nothing is staged.

		Raises:
			RepositoryError: Not inside a git repository
			NoChangesSignal: Nothing staged or unstaged
			CommandExecutionError: A git command failed

		"""
		...

	def stage_all(self) -> None:
		"""Stage every change in the working tree."""
		...

	def commit(self, message: str) -> None:
		"""Create a commit with ``message``."""
		...

	def push(self) -> None:
		"""Push the current branch."""
		...


class ModelClient(Protocol):
	"""Text generation backend."""

	def generate(self, model: str, prompt: str) -> str:
		"""
		Generate text for ``prompt`` with ``model``.

		Raises:
			ModelUnavailableError: Unknown model or empty response
			TransientModelError: Timeout, network or HTTP failure

		"""
		...

	def test_connection(self) -> bool:
		"""Return True if the server answers within the connection timeout."""
		...
