"""Utility modules for ollama-git-commit."""
