"""Credential resolution collaborators."""

from .keys import KeyResolution, KeysRepository, SecretResolver, StaticSecretResolver

__all__ = ["KeyResolution", "KeysRepository", "SecretResolver", "StaticSecretResolver"]
