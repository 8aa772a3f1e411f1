"""HTTP client for the Ollama model server."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ollama_commit.config.defaults import PREFERRED_MODELS
from ollama_commit.errors import ModelUnavailableError, TransientModelError
from ollama_commit.utils.url_utils import normalize_host

if TYPE_CHECKING:
	from collections.abc import Callable

	from ollama_commit.config.schema import TimeoutsConfig

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class ModelDetails(BaseModel):
	"""Optional ``details`` block of a model listing."""

	model_config = ConfigDict(extra="ignore")

	family: str | None = None
	parameter_size: str | None = None
	quantization_level: str | None = None


class ModelInfo(BaseModel):
	"""One entry of ``GET /api/tags``."""

	model_config = ConfigDict(extra="ignore", protected_namespaces=())

	name: str
	size: int = 0
	modified_at: str | None = None
	digest: str | None = None
	details: ModelDetails = Field(default_factory=ModelDetails)


class OllamaClient:
	"""
	Talks to an Ollama server over its REST API.

	Failures are raised as tagged errors: ``ModelUnavailableError`` for
	unknown models and empty responses, ``TransientModelError`` for
	timeouts, connection problems and other HTTP failures.

	"""

	def __init__(
		self,
		host: str,
		timeouts: TimeoutsConfig,
		session: requests.Session | None = None,
	) -> None:
		"""
		Initialize the client.

		Args:
			host: Server base URL; a missing scheme is filled in
			timeouts: Connection, generation and pull timeouts in milliseconds
			session: Optional session, mainly for tests

		"""
		self.host = normalize_host(host)
		self.timeouts = timeouts
		self.session = session or requests.Session()

	def _url(self, path: str) -> str:
		return f"{self.host}{path}"

	def _post(self, path: str, payload: dict[str, Any], timeout_ms: int, **kwargs: Any) -> requests.Response:  # noqa: ANN401
		url = self._url(path)
		try:
			response = self.session.post(url, json=payload, timeout=timeout_ms / 1000, **kwargs)
		except requests.Timeout as e:
			msg = f"Request timed out after {timeout_ms}ms - Ollama may be busy or the model is too large"
			raise TransientModelError(msg) from e
		except requests.ConnectionError as e:
			msg = f"Failed to connect to Ollama at {self.host}: {e}"
			raise TransientModelError(msg) from e
		except requests.RequestException as e:
			msg = f"HTTP request to {url} failed: {e}"
			raise TransientModelError(msg) from e
		return response

	@staticmethod
	def _error_detail(response: requests.Response) -> str:
		try:
			body = response.json()
		except ValueError:
			return response.text.strip()
		if isinstance(body, dict) and "error" in body:
			return str(body["error"])
		return response.text.strip()

	def generate(self, model: str, prompt: str) -> str:
		"""
		Generate a completion with ``stream`` disabled.

		Args:
			model: Model id, e.g. ``llama3``
			prompt: Full prompt text

		Returns:
			str: The stripped ``response`` field

		Raises:
			ModelUnavailableError: Model not found or empty response
			TransientModelError: Timeout, connection or HTTP failure

		"""
		logger.debug("Generating with %s at %s (prompt length %d)", model, self.host, len(prompt))
		response = self._post(
			"/api/generate",
			{"model": model, "prompt": prompt, "stream": False},
			self.timeouts.generation,
		)

		if response.status_code == HTTP_NOT_FOUND:
			msg = f"Model not found: '{model}' ({self._error_detail(response)})"
			raise ModelUnavailableError(msg)
		if not response.ok:
			msg = f"HTTP {response.status_code}: {response.reason} {self._error_detail(response)}".rstrip()
			raise TransientModelError(msg)

		if not response.text.strip():
			msg = "Empty response from Ollama"
			raise ModelUnavailableError(msg)
		try:
			data = response.json()
		except ValueError as e:
			msg = f"HTTP response was not valid JSON: {e}"
			raise TransientModelError(msg) from e

		message = str(data.get("response") or "").strip() if isinstance(data, dict) else ""
		if not message:
			msg = f"Empty response from model '{model}'"
			raise ModelUnavailableError(msg)
		logger.debug("Received %d characters from %s", len(message), model)
		return message

	def list_models(self) -> list[ModelInfo]:
		"""
		Return the models installed on the server.

		Raises:
			TransientModelError: The server could not be reached

		"""
		url = self._url("/api/tags")
		try:
			response = self.session.get(url, timeout=self.timeouts.connection / 1000)
			response.raise_for_status()
			data = response.json()
		except requests.Timeout as e:
			msg = f"Connection to {self.host} timed out"
			raise TransientModelError(msg) from e
		except requests.RequestException as e:
			msg = f"Failed to connect to Ollama at {self.host}: {e}"
			raise TransientModelError(msg) from e
		except ValueError as e:
			msg = f"Invalid model listing from {self.host}: {e}"
			raise TransientModelError(msg) from e

		models: list[ModelInfo] = []
		for entry in data.get("models", []) if isinstance(data, dict) else []:
			try:
				models.append(ModelInfo.model_validate(entry))
			except ValidationError:
				logger.debug("Skipping malformed model entry: %r", entry)
		return models

	def test_connection(self) -> bool:
		"""Return True if ``/api/tags`` answers within the connection timeout."""
		try:
			self.list_models()
		except TransientModelError as e:
			logger.error("Cannot connect to Ollama at %s: %s", self.host, e)  # noqa: TRY400
			return False
		return True

	def is_model_available(self, model: str) -> bool:
		"""Return True if ``model`` is installed. Unreachable servers count as unavailable."""
		try:
			names = {info.name for info in self.list_models()}
		except TransientModelError as e:
			logger.warning("Error checking model availability: %s", e)
			return False
		return model in names or f"{model}:latest" in names

	def get_default_model(self) -> str | None:
		"""
		Pick an installed model for ``--auto-model``.

		Preferred models are tried in order, matching on the name before
		the tag. Falls back to the first installed model.

		"""
		models = self.list_models()
		if not models:
			return None
		names = [info.name for info in models]
		for preferred in PREFERRED_MODELS:
			for name in names:
				if name == preferred or name.split(":")[0] == preferred:
					return name
		return names[0]

	def pull_model(self, model: str, on_status: Callable[[str], None] | None = None) -> None:
		"""
		Pull ``model`` and wait for the stream to finish.

		Args:
			model: Model id to pull
			on_status: Called with each ``status`` line reported by the server

		Raises:
			ModelUnavailableError: The server rejected the model id
			TransientModelError: Timeout, connection or HTTP failure

		"""
		logger.info("Pulling model %s from %s", model, self.host)
		response = self._post(
			"/api/pull",
			{"name": model, "stream": True},
			self.timeouts.model_pull,
			stream=True,
		)
		with response:
			if not response.ok:
				detail = self._error_detail(response)
				msg = f"HTTP {response.status_code}: {response.reason}. Details: {detail}"
				if response.status_code == HTTP_NOT_FOUND or "not found" in detail.lower():
					raise ModelUnavailableError(msg)
				raise TransientModelError(msg)
			try:
				for line in response.iter_lines(decode_unicode=True):
					if not line:
						continue
					try:
						event = json.loads(line)
					except json.JSONDecodeError:
						continue
					if "error" in event:
						msg = f"Failed to pull model '{model}': {event['error']}"
						raise ModelUnavailableError(msg)
					if on_status and event.get("status"):
						on_status(str(event["status"]))
			except requests.RequestException as e:
				msg = f"Connection lost while pulling '{model}': {e}"
				raise TransientModelError(msg) from e
		logger.info("Model '%s' pulled successfully", model)
