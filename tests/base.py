"""Shared base classes and fakes for tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest

from ollama_commit.config import ConfigManager

if TYPE_CHECKING:
	from pathlib import Path

	from ollama_commit.commit.interactive import CommitAction
	from ollama_commit.git.utils import ChangeSet


class FileSystemTestBase:
	"""Base for tests that work inside a temporary directory."""

	temp_dir: Path

	@pytest.fixture(autouse=True)
	def setup_temp_dir(self, tmp_path: Path) -> None:
		"""Expose ``tmp_path`` as ``self.temp_dir``."""
		self.temp_dir = tmp_path

	def write_json(self, path: Path, content: Any) -> Path:  # noqa: ANN401
		"""Write ``content`` as JSON, creating parent directories."""
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(json.dumps(content), encoding="utf-8")
		return path

	def read_json(self, path: Path) -> Any:  # noqa: ANN401
		"""Read a JSON file."""
		return json.loads(path.read_text(encoding="utf-8"))


class ConfigTestBase(FileSystemTestBase):
	"""Base for configuration tests with isolated user and project files."""

	user_file: Path
	project_dir: Path

	@pytest.fixture(autouse=True)
	def setup_config_paths(self, setup_temp_dir: None) -> None:
		"""Point the user file and project directory into the temp dir."""
		self.user_file = self.temp_dir / "xdg" / "ollama-git-commit" / "config.json"
		self.project_dir = self.temp_dir / "project"
		self.project_dir.mkdir()

	@property
	def project_file(self) -> Path:
		"""The project-local configuration file."""
		return self.project_dir / ".ollama-git-commit.json"

	def make_manager(self, env: dict[str, str] | None = None) -> ConfigManager:
		"""Create a manager reading only the temp files and ``env``."""
		return ConfigManager(project_dir=self.project_dir, user_config_file=self.user_file, env=env or {})


# --- Collaborator fakes ---


@dataclass
class FakeGit:
	"""In-memory change-set provider recording every side effect."""

	change_set: ChangeSet | None = None
	errors: list[Exception] = field(default_factory=list)
	commit_error: Exception | None = None
	push_error: Exception | None = None
	calls: list[str] = field(default_factory=list)
	commits: list[str] = field(default_factory=list)

	def get_changes(self, *, verbose: bool = False) -> ChangeSet:  # noqa: ARG002
		self.calls.append("get_changes")
		if self.errors:
			raise self.errors.pop(0)
		if self.change_set is None:
			msg = "No change set configured"
			raise AssertionError(msg)
		return self.change_set

	def stage_all(self) -> None:
		self.calls.append("stage_all")

	def commit(self, message: str) -> None:
		self.calls.append("commit")
		if self.commit_error is not None:
			raise self.commit_error
		self.commits.append(message)

	def push(self) -> None:
		self.calls.append("push")
		if self.push_error is not None:
			raise self.push_error


@dataclass
class FakeClient:
	"""Model client returning scripted replies; exceptions in ``replies`` are raised."""

	replies: list[str | Exception] = field(default_factory=list)
	prompts: list[tuple[str, str]] = field(default_factory=list)
	connected: bool = True

	def test_connection(self) -> bool:
		return self.connected

	def generate(self, model: str, prompt: str) -> str:
		self.prompts.append((model, prompt))
		reply = self.replies.pop(0)
		if isinstance(reply, Exception):
			raise reply
		return reply


class FakeUI:
	"""Records UI calls and answers ``get_user_action`` from a script."""

	def __init__(self, actions: list[CommitAction | Exception] | None = None) -> None:
		self.actions = list(actions or [])
		self.events: list[tuple[str, object]] = []

	def __getattr__(self, name: str):  # noqa: ANN204
		if not name.startswith("show_") and name != "display_message":
			raise AttributeError(name)

		def record(*args: object, **_kwargs: object) -> None:
			self.events.append((name, args[0] if len(args) == 1 else args))

		return record

	def get_user_action(self, *, auto_commit: bool = False) -> CommitAction:
		self.events.append(("get_user_action", auto_commit))
		action = self.actions.pop(0)
		if isinstance(action, Exception):
			raise action
		return action

	def named(self, name: str) -> list[object]:
		"""Return the payloads of every recorded call to ``name``."""
		return [payload for event, payload in self.events if event == name]
