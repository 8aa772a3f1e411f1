"""
Error taxonomy for Ollama Git Commit.

Every failure that can reach the commit orchestrator is tagged with an
``ErrorKind`` at the point where it originates (the git layer or the model
client), so the retry policy can classify it without inspecting messages.

"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(Enum):
	"""Closed set of failure kinds produced by the collaborators."""

	REPOSITORY = "repository"
	NO_CHANGES = "no_changes"
	COMMAND_EXECUTION = "command_execution"
	MODEL_UNAVAILABLE = "model_unavailable"
	TRANSIENT_MODEL = "transient_model"


class OllamaCommitError(Exception):
	"""Base class for tagged errors raised by the git and model layers."""

	kind: ClassVar[ErrorKind]


class RepositoryError(OllamaCommitError):
	"""The target directory is not a git repository."""

	kind = ErrorKind.REPOSITORY


class NoChangesSignal(OllamaCommitError):
	"""Neither staged nor unstaged changes exist. Not an error for the user."""

	kind = ErrorKind.NO_CHANGES


class CommandExecutionError(OllamaCommitError):
	"""A git subprocess failed."""

	kind = ErrorKind.COMMAND_EXECUTION


class ModelUnavailableError(OllamaCommitError):
	"""The model id is unknown or the model produced an empty response."""

	kind = ErrorKind.MODEL_UNAVAILABLE


class TransientModelError(OllamaCommitError):
	"""Timeout, network or HTTP-layer failure talking to the model server."""

	kind = ErrorKind.TRANSIENT_MODEL


class ConfigError(Exception):
	"""Exception raised when configuration cannot be persisted or removed."""


class ConfigurationWarning(UserWarning):
	"""A configuration layer or field was rejected and the next-lower source is used."""
