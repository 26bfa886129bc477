"""LLM integration module for the fitness chat proxy."""

from app.llm.gemini_client import GeminiClient, gemini_available, get_gemini_client

__all__ = [
    # Gemini client
    "GeminiClient",
    "get_gemini_client",
    "gemini_available",
]
