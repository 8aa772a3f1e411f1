"""Git utilities for ollama-git-commit."""

from ollama_commit.git.utils import ChangeSet, ChangeStats, GitService, run_git_command

__all__ = [
	"ChangeSet",
	"ChangeStats",
	"GitService",
	"run_git_command",
]
