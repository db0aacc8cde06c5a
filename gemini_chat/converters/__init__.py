"""Converters between caller values and Gemini wire models."""
