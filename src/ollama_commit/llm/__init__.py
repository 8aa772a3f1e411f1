"""Model server clients for ollama-git-commit."""

from ollama_commit.llm.ollama import ModelInfo, OllamaClient

__all__ = ["ModelInfo", "OllamaClient"]
