"""URL helpers for talking to the Ollama server."""

from __future__ import annotations

HTTP_SCHEMES = ("http://", "https://")


def has_scheme(host: str) -> bool:
	"""Return True if ``host`` already starts with http:// or https://."""
	return host.lower().startswith(HTTP_SCHEMES)


def normalize_host(host: str) -> str:
	"""
	Normalize an Ollama host value into a base URL.

	Strips surrounding whitespace and trailing slashes and prefixes
	``http://`` when no scheme is present.

	Args:
		host: Raw host value, e.g. ``localhost:11434`` or ``http://gpu-box:11434/``

	Returns:
		str: Base URL without a trailing slash

	"""
	cleaned = host.strip().rstrip("/")
	if cleaned and not has_scheme(cleaned):
		cleaned = f"http://{cleaned}"
	return cleaned
