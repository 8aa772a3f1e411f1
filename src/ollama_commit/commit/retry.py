"""
Retry policy for commit message generation.

One attempt covers fetching the change set, building the prompt and
calling the model. Failures are classified by their ``ErrorKind``;
untyped exceptions fall back to message matching.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from ollama_commit.errors import ErrorKind, OllamaCommitError

if TYPE_CHECKING:
	from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
BASE_DELAY_MS = 1000
MAX_DELAY_MS = 5000

# Fatal markers take priority over retryable ones
FATAL_MARKERS = ("empty response", "model not found", "invalid model")
RETRYABLE_MARKERS = ("failed to connect", "timeout", "timed out", "network", "connection", "http")


class ErrorClass(Enum):
	"""How the retry loop treats a failure."""

	INFORMATIONAL = "informational"
	FATAL = "fatal"
	RETRYABLE = "retryable"


_KIND_CLASSES = {
	ErrorKind.NO_CHANGES: ErrorClass.INFORMATIONAL,
	ErrorKind.REPOSITORY: ErrorClass.FATAL,
	ErrorKind.MODEL_UNAVAILABLE: ErrorClass.FATAL,
	ErrorKind.COMMAND_EXECUTION: ErrorClass.RETRYABLE,
	ErrorKind.TRANSIENT_MODEL: ErrorClass.RETRYABLE,
}


def classify_message(message: str) -> ErrorClass:
	"""Classify an untyped failure by its message."""
	lowered = message.lower()
	if any(marker in lowered for marker in FATAL_MARKERS):
		return ErrorClass.FATAL
	if any(marker in lowered for marker in RETRYABLE_MARKERS):
		return ErrorClass.RETRYABLE
	return ErrorClass.FATAL


def classify_error(error: BaseException) -> ErrorClass:
	"""
	Classify a failure raised by one generation attempt.

	Args:
		error: The exception raised by the attempt

	Returns:
		ErrorClass: informational, fatal or retryable

	"""
	if isinstance(error, OllamaCommitError):
		return _KIND_CLASSES[error.kind]
	if isinstance(error, TimeoutError | ConnectionError):
		return ErrorClass.RETRYABLE
	return classify_message(str(error))


def backoff_delay_ms(attempt: int) -> int:
	"""Delay after failed ``attempt`` (1-based): 1000, 2000, 4000, then 5000 ms."""
	return min(BASE_DELAY_MS * 2 ** (attempt - 1), MAX_DELAY_MS)


@dataclass(frozen=True)
class Ok(Generic[T]):
	"""The attempt produced a value."""

	value: T


@dataclass(frozen=True)
class Informational:
	"""The run ends cleanly without a value, e.g. nothing to commit."""

	reason: str


@dataclass(frozen=True)
class Fatal:
	"""The run failed and must stop."""

	error: BaseException
	attempts: int = 1

	@property
	def message(self) -> str:
		"""User-facing description of the failure."""
		return str(self.error) or type(self.error).__name__


def run_with_retry(
	attempt_fn: Callable[[], T],
	sleep: Callable[[float], None],
	max_attempts: int = MAX_ATTEMPTS,
	on_retry: Callable[[int, BaseException, int], None] | None = None,
) -> Ok[T] | Informational | Fatal:
	"""
	Run ``attempt_fn`` until it succeeds or a non-retryable failure occurs.

	There is no delay after the last attempt. Exhausting all attempts on
	retryable failures yields ``Fatal`` carrying the last error.

	Args:
		attempt_fn: One generation attempt
		sleep: Sleep function taking seconds (injected for tests)
		max_attempts: Attempt cap
		on_retry: Called with ``(attempt, error, delay_ms)`` before each delay

	Returns:
		Ok, Informational or Fatal

	"""
	last_error: BaseException | None = None
	for attempt in range(1, max_attempts + 1):
		try:
			return Ok(attempt_fn())
		except Exception as e:  # noqa: BLE001
			error_class = classify_error(e)
			if error_class is ErrorClass.INFORMATIONAL:
				return Informational(str(e))
			if error_class is ErrorClass.FATAL:
				logger.debug("Attempt %d failed with a non-retryable error: %s", attempt, e)
				return Fatal(e, attempts=attempt)
			last_error = e
			logger.debug("Attempt %d/%d failed with a retryable error: %s", attempt, max_attempts, e)
			if attempt < max_attempts:
				delay_ms = backoff_delay_ms(attempt)
				if on_retry is not None:
					on_retry(attempt, e, delay_ms)
				sleep(delay_ms / 1000)

	if last_error is None:  # pragma: no cover - max_attempts < 1
		last_error = RuntimeError("No generation attempts were made")
	return Fatal(last_error, attempts=max_attempts)
