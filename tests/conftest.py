"""Global test fixtures and configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from ollama_commit.config import resolve_layers
from ollama_commit.git.utils import ChangeSet, ChangeStats
from tests.base import FakeClient, FakeGit

if TYPE_CHECKING:
	from pathlib import Path

	from ollama_commit.config.schema import ResolvedConfig

SAMPLE_DIFF = """diff --git a/app.py b/app.py
index 1111111..2222222 100644
--- a/app.py
+++ b/app.py
@@ -1,2 +1,3 @@
 import os
+def greet(name):
+    return f"hello {name}"
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
	"""Keep the developer's Ollama settings out of the tests."""
	for name in list(os.environ):
		if name == "OLLAMA_HOST" or name.startswith("OLLAMA_COMMIT_"):
			monkeypatch.delenv(name)


@pytest.fixture
def sample_change_set() -> ChangeSet:
	"""A small staged change set."""
	return ChangeSet(
		diff=SAMPLE_DIFF,
		staged=True,
		stats=ChangeStats(files=1, insertions=2, deletions=0),
		per_file_summary="📁 1 files changed:\n📄 app.py (modified) (+2 -0, 1 new functions/vars)",
	)


@pytest.fixture
def fake_git(sample_change_set: ChangeSet) -> FakeGit:
	"""Change-set provider returning the sample change set."""
	return FakeGit(change_set=sample_change_set)


@pytest.fixture
def fake_client() -> FakeClient:
	"""Model client with no scripted replies."""
	return FakeClient()


@pytest.fixture
def base_config(tmp_path: Path) -> ResolvedConfig:
	"""Built-in defaults with a custom prompt file that does not exist."""
	config, _ = resolve_layers({"prompt_file": str(tmp_path / "missing-prompt.txt")}, {}, {})
	return config
