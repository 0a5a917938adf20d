"""ProviderAdapter Protocol.

Defines the public contract every vendor adapter satisfies. The registry
checks registrations against it structurally, so third-party adapters do not
have to inherit from :class:`llm_adapters.base.adapter.BaseAdapter` (although
in practice they should, to get the request loop and error handling).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from .models import CompletionResponse, EmbeddingResponse, VisionResponse
from .streaming import DeltaStream

Message = Mapping[str, Any]
Options = Optional[Mapping[str, Any]]


@runtime_checkable
class ProviderAdapter(Protocol):
    """Provider-agnostic contract for one vendor API.

    Implementations map normalized messages/options to the vendor request
    shape, normalize responses into the value objects of ``base.models``, and
    raise the typed errors of ``base.errors`` rather than generic ones.
    """

    def get_identifier(self) -> str:
        """Stable vendor identifier, e.g. ``"openai"`` or ``"claude"``."""
        ...

    def get_name(self) -> str: ...

    def configure(self, options: Mapping[str, Any]) -> None: ...

    def is_available(self) -> bool: ...

    def supports_feature(self, feature: str) -> bool: ...

    def get_default_model(self) -> str: ...

    def chat_completion(self, messages: Sequence[Message], options: Options = None) -> CompletionResponse: ...

    def chat_completion_with_tools(
        self, messages: Sequence[Message], tools: Sequence[Mapping[str, Any]], options: Options = None
    ) -> CompletionResponse: ...

    def complete(self, prompt: str, options: Options = None) -> CompletionResponse: ...

    def embeddings(self, inputs: Union[str, Sequence[str]], options: Options = None) -> EmbeddingResponse: ...

    def analyze_image(self, content: List[Mapping[str, Any]], options: Options = None) -> VisionResponse: ...

    def stream_chat_completion(self, messages: Sequence[Message], options: Options = None) -> DeltaStream: ...

    def get_available_models(self) -> Dict[str, str]: ...

    def test_connection(self) -> Dict[str, Any]: ...


__all__ = ["ProviderAdapter", "Message", "Options"]
