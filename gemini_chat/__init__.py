"""Streaming conversational client for the Gemini text generation service."""

__version__ = "0.1.0"
