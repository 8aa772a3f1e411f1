"""Checks that the Ollama server and a model are usable."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Callable

	from ollama_commit.interfaces import ModelClient

logger = logging.getLogger(__name__)

TROUBLESHOOTING = """Troubleshooting:
   1. Check that Ollama is running: ollama serve
   2. Check the host: ollama-commit config show
   3. Check the host is reachable: curl {host}/api/tags
   4. Set the host explicitly: export OLLAMA_HOST={host}"""

SIMPLE_TEST_PROMPT = "Hello, please respond with: Test successful"
SAMPLE_COMMIT_PROMPT = 'Write a simple commit message for: "Add new feature"'
BENCHMARK_PROMPT = 'Write a commit message for: "Performance optimization"'


def troubleshooting(host: str) -> str:
	"""Return the troubleshooting steps for an unreachable ``host``."""
	return TROUBLESHOOTING.format(host=host)


def run_simple_prompt(client: ModelClient, model: str) -> str:
	"""
	Ask ``model`` for a trivial reply.

	Raises:
		ModelUnavailableError: Unknown model or empty response
		TransientModelError: Timeout, network or HTTP failure

	"""
	reply = client.generate(model, SIMPLE_TEST_PROMPT)
	logger.debug("Simple prompt reply from %s: %s", model, reply[:100])
	return reply


@dataclass(frozen=True)
class BenchmarkResult:
	"""Durations of repeated generations."""

	durations_ms: list[float]

	@property
	def average_ms(self) -> float:
		"""Mean duration in milliseconds."""
		return sum(self.durations_ms) / len(self.durations_ms) if self.durations_ms else 0.0

	@property
	def fastest_ms(self) -> float:
		"""Shortest duration in milliseconds."""
		return min(self.durations_ms, default=0.0)

	@property
	def slowest_ms(self) -> float:
		"""Longest duration in milliseconds."""
		return max(self.durations_ms, default=0.0)


def run_benchmark(
	client: ModelClient,
	model: str,
	runs: int = 3,
	prompt: str = BENCHMARK_PROMPT,
	clock: Callable[[], float] = time.perf_counter,
) -> BenchmarkResult:
	"""
	Time ``runs`` sequential generations of ``prompt``.

	A failing generation stops the benchmark and propagates.

	"""
	durations: list[float] = []
	for run in range(1, runs + 1):
		started = clock()
		client.generate(model, prompt)
		elapsed = (clock() - started) * 1000
		logger.debug("Benchmark run %d/%d took %.0fms", run, runs, elapsed)
		durations.append(elapsed)
	return BenchmarkResult(durations)
