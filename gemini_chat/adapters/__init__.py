"""Adapters module."""

from gemini_chat.adapters.gemini_adapter import GeminiAdapter

__all__ = ["GeminiAdapter"]
