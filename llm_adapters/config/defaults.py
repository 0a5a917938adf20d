"""llm_adapters.config.defaults
============================

Central place for small, stable default values used across the adapter
layer: vendor base URLs, default chat/embedding/vision models, protocol
versions and request-loop tuning constants. These defaults can be overridden
through ``configure()`` options, environment variables or an external config
file, but provide sensible fallbacks for local development and tests.

This module intentionally imports nothing from the rest of the package so it
can be used anywhere without circular dependencies.
"""

from __future__ import annotations

# ---- Request loop ----
# Default per-attempt timeout in seconds.
DEFAULT_TIMEOUT_SECONDS = 30
# Connect phase never waits longer than this, whatever the configured timeout.
CONNECT_TIMEOUT_CAP_SECONDS = 10
DEFAULT_MAX_RETRIES = 3
# Backoff before attempt n+1 is BACKOFF_BASE_SECONDS * 2**n.
BACKOFF_BASE_SECONDS = 0.1

# ---- Generation parameters shared by chat endpoints ----
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096

# ---- OpenAI ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-5.2"
OPENAI_DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# ---- Anthropic ----
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
ANTHROPIC_API_VERSION = "2023-06-01"

# ---- Gemini ----
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_DEFAULT_MODEL = "gemini-3-flash-preview"
GEMINI_DEFAULT_EMBEDDING_MODEL = "text-embedding-004"

# ---- Ollama (local daemon) ----
OLLAMA_DEFAULT_HOST = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL = "llama3.2"
OLLAMA_DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"

# ---- OpenRouter ----
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_MODEL = "anthropic/claude-sonnet-4-5"
OPENROUTER_DEFAULT_EMBEDDING_MODEL = "openai/text-embedding-3-small"
OPENROUTER_DEFAULT_APP_NAME = "LLM Adapters"
OPENROUTER_DEFAULT_VISION_MODEL = "openai/gpt-5.2"
# Checked in order when the default model is not known to accept images.
OPENROUTER_VISION_MODELS = (
    "anthropic/claude-sonnet-4-5",
    "anthropic/claude-opus-4-5",
    "openai/gpt-5.2",
    "openai/gpt-5.2-pro",
    "google/gemini-3-flash",
)

# ---- Groq ----
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "llama-3.3-70b-versatile"
GROQ_FAST_MODEL = "llama-3.1-8b-instant"
GROQ_VISION_MODEL = "llama-3.2-90b-vision-preview"

# ---- Mistral ----
MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
MISTRAL_DEFAULT_MODEL = "mistral-large-latest"
MISTRAL_DEFAULT_EMBEDDING_MODEL = "mistral-embed"
MISTRAL_CODE_MODEL = "codestral-latest"
MISTRAL_SMALL_MODEL = "mistral-small-latest"


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "CONNECT_TIMEOUT_CAP_SECONDS",
    "DEFAULT_MAX_RETRIES",
    "BACKOFF_BASE_SECONDS",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "OPENAI_DEFAULT_EMBEDDING_MODEL",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_DEFAULT_MODEL",
    "ANTHROPIC_API_VERSION",
    "GEMINI_DEFAULT_BASE_URL",
    "GEMINI_DEFAULT_MODEL",
    "GEMINI_DEFAULT_EMBEDDING_MODEL",
    "OLLAMA_DEFAULT_HOST",
    "OLLAMA_DEFAULT_MODEL",
    "OLLAMA_DEFAULT_EMBEDDING_MODEL",
    "OPENROUTER_DEFAULT_BASE_URL",
    "OPENROUTER_DEFAULT_MODEL",
    "OPENROUTER_DEFAULT_EMBEDDING_MODEL",
    "OPENROUTER_DEFAULT_APP_NAME",
    "OPENROUTER_DEFAULT_VISION_MODEL",
    "OPENROUTER_VISION_MODELS",
    "GROQ_DEFAULT_BASE_URL",
    "GROQ_DEFAULT_MODEL",
    "GROQ_FAST_MODEL",
    "GROQ_VISION_MODEL",
    "MISTRAL_DEFAULT_BASE_URL",
    "MISTRAL_DEFAULT_MODEL",
    "MISTRAL_DEFAULT_EMBEDDING_MODEL",
    "MISTRAL_CODE_MODEL",
    "MISTRAL_SMALL_MODEL",
]
