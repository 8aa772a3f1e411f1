"""Commit message generation workflow."""

from ollama_commit.commit.command import CommitCommand, CommitResult, CommitState, RunOutcome
from ollama_commit.commit.interactive import CommitAction, CommitUI
from ollama_commit.commit.retry import ErrorClass, Fatal, Informational, Ok, classify_error, run_with_retry

__all__ = [
	"CommitAction",
	"CommitCommand",
	"CommitResult",
	"CommitState",
	"CommitUI",
	"ErrorClass",
	"Fatal",
	"Informational",
	"Ok",
	"RunOutcome",
	"classify_error",
	"run_with_retry",
]
