"""Shared adapter behavior: configuration, transport lifecycle, request loop.

Purpose:
    Every vendor adapter extends :class:`BaseAdapter` and only supplies the
    vendor-specific request/response mapping. Configuration, credential
    resolution, the HTTP client handle, the retry/backoff request loop, error
    classification and response construction live here and are identical for
    all vendors.

External dependencies:
    - ``httpx`` through the default transport (``base.http``); any object
      satisfying :class:`llm_adapters.base.http.Transport` can be injected.

Timeout strategy:
    - Each attempt is bounded by the configured ``timeout`` (send) with the
      connect phase capped at 10 seconds. There is no end-to-end deadline:
      worst case is ``maxRetries * timeout`` plus backoff delays.
    - The self-managed transport is rebuilt only when ``timeout`` changes.
      An injected transport wins until a timeout change forces the adapter
      back onto a self-managed one.

Request loop:
    - Up to ``maxRetries`` strictly sequential attempts.
    - Transport failures and statuses outside 2xx/4xx are retried with a
      ``0.1 * 2**n`` second backoff, then surface as ``ProviderUnreachable``
      carrying the attempt count and last message.
    - 2xx decodes the JSON body; 4xx raises ``ProviderRejected`` immediately.

Failure modes:
    - Missing credentials raise ``ConfigurationError`` at call time only;
      ``configure()`` never validates eagerly.
    - Capabilities a vendor lacks raise ``UnsupportedFeature``.
    - A connection lost after a stream started raises ``ProviderUnreachable``
      from the stream itself; the partial stream is never retried.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

from . import accessor
from .dto import AdapterConfig
from .errors import (
    ConfigurationError,
    ErrorCode,
    ProviderError,
    ProviderRejected,
    ProviderUnreachable,
    UnsupportedFeature,
)
from .http import HttpRequest, HttpResponse, Transport, TransportError, create_transport
from .logging import LogContext, get_logger, log_event, normalized_log_event
from .models import CompletionResponse, EmbeddingResponse, ToolCall, UsageStatistics, VisionResponse
from .repositories import KeysRepository, SecretResolver
from .resilience.retry import RetryConfig, retry
from .streaming import DeltaStream
from ..config.defaults import BACKOFF_BASE_SECONDS

UNKNOWN_ERROR_MESSAGE = "Unknown provider error"

FEATURE_CHAT = "chat"
FEATURE_COMPLETION = "completion"
FEATURE_EMBEDDINGS = "embeddings"
FEATURE_VISION = "vision"
FEATURE_STREAMING = "streaming"
FEATURE_TOOLS = "tools"


class _AttemptFailed(ProviderError):
    """One failed attempt that the request loop may retry."""

    def __init__(self, message: str, provider: str, status_code: Optional[int] = None, raw: Optional[Exception] = None):
        super().__init__(code=ErrorCode.TRANSIENT, message=message, provider=provider, retryable=True, raw=raw)
        self.status_code = status_code


class BaseAdapter(ABC):
    """Common base for vendor adapters.

    Subclasses set the class attributes below and implement
    :meth:`chat_completion`; other capabilities are opt-in overrides.

    Class attributes:
        IDENTIFIER: Stable vendor identifier stamped into every response.
        NAME: Human-readable vendor name.
        DEFAULT_BASE_URL: Used when ``baseUrl`` is not configured.
        DEFAULT_MODEL: Used when neither options nor config name a model.
        SUPPORTED_FEATURES: Exact, case-sensitive capability names.
        REQUIRES_API_KEY: False for self-hosted vendors (available once a
            base URL is set).
        STATIC_MODELS: Curated model id → label map for listing.
    """

    IDENTIFIER: str = ""
    NAME: str = ""
    DEFAULT_BASE_URL: str = ""
    DEFAULT_MODEL: str = ""
    SUPPORTED_FEATURES: FrozenSet[str] = frozenset({FEATURE_CHAT, FEATURE_COMPLETION})
    REQUIRES_API_KEY: bool = True
    STATIC_MODELS: Dict[str, str] = {}

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        *,
        secret_resolver: Optional[SecretResolver] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._secrets: SecretResolver = secret_resolver or KeysRepository()
        self._injected_transport: Optional[Transport] = transport
        self._owned_transport: Optional[Transport] = None
        self._owned_timeout: Optional[int] = None
        self._logger: logging.Logger = get_logger(f"providers.{self.IDENTIFIER or 'adapter'}")
        self._config = AdapterConfig.from_options(options or {}, self.DEFAULT_BASE_URL)
        self._configure_vendor(self._config.extra)

    # ------------------------------------------------------------------
    # Identity & configuration
    # ------------------------------------------------------------------
    def get_identifier(self) -> str:
        return self.IDENTIFIER

    def get_name(self) -> str:
        return self.NAME

    @property
    def config(self) -> AdapterConfig:
        return self._config

    def configure(self, options: Mapping[str, Any]) -> None:
        """Replace the configuration from a flat options map.

        Last call wins. Unrecognized keys are ignored by the common fields and
        handed to :meth:`_configure_vendor`. Changing ``timeout`` drops the
        current HTTP client handle (owned or injected).
        """
        previous_timeout = self._config.timeout
        self._config = AdapterConfig.from_options(options, self.DEFAULT_BASE_URL)
        if self._config.timeout != previous_timeout:
            self._invalidate_transport()
        self._configure_vendor(self._config.extra)

    def _configure_vendor(self, options: Dict[str, Any]) -> None:
        """Hook for vendor-specific options; default ignores them."""

    @property
    def connect_timeout(self) -> float:
        return self._config.connect_timeout

    @property
    def send_timeout(self) -> float:
        return self._config.send_timeout

    def get_default_model(self) -> str:
        return self._config.default_model or self.DEFAULT_MODEL

    # ------------------------------------------------------------------
    # Transport lifecycle
    # ------------------------------------------------------------------
    def set_transport(self, transport: Transport) -> None:
        """Inject a transport; it wins until the configured timeout changes."""
        self._injected_transport = transport

    @property
    def http_client(self) -> Transport:
        """The transport the next request will use (built lazily)."""
        return self._get_transport()

    def _get_transport(self) -> Transport:
        if self._injected_transport is not None:
            return self._injected_transport
        if self._owned_transport is None or self._owned_timeout != self._config.timeout:
            self._close_owned_transport()
            self._owned_transport = create_transport(self._config.timeout)
            self._owned_timeout = self._config.timeout
        return self._owned_transport

    def _invalidate_transport(self) -> None:
        self._injected_transport = None
        self._close_owned_transport()

    def _close_owned_transport(self) -> None:
        transport, self._owned_transport = self._owned_transport, None
        self._owned_timeout = None
        close = getattr(transport, "close", None)
        if callable(close):
            close()

    def close(self) -> None:
        self._close_owned_transport()

    # ------------------------------------------------------------------
    # Credentials & capabilities
    # ------------------------------------------------------------------
    def _resolve_api_key(self) -> str:
        if self._config.api_key:
            return self._config.api_key
        if self._config.api_key_identifier:
            return self._secrets.resolve(self._config.api_key_identifier) or ""
        return ""

    def is_available(self) -> bool:
        if not self.REQUIRES_API_KEY:
            return bool(self._config.base_url)
        return bool(self._resolve_api_key())

    def _require_credentials(self) -> str:
        """Return the resolved API key or raise ``ConfigurationError``."""
        if not self._config.base_url:
            raise ConfigurationError(f"Base URL is required for provider {self.NAME}", provider=self.IDENTIFIER)
        if not self.REQUIRES_API_KEY:
            return ""
        key = self._resolve_api_key()
        if not key:
            raise ConfigurationError(
                f"API key is required for provider {self.NAME}", provider=self.IDENTIFIER
            )
        return key

    def supports_feature(self, feature: str) -> bool:
        return isinstance(feature, str) and feature in self.SUPPORTED_FEATURES

    def supports_streaming(self) -> bool:
        return self.supports_feature(FEATURE_STREAMING)

    def supports_tools(self) -> bool:
        return self.supports_feature(FEATURE_TOOLS)

    def supports_vision(self) -> bool:
        return self.supports_feature(FEATURE_VISION)

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------
    @abstractmethod
    def chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> CompletionResponse:
        """Run one non-streaming chat completion."""

    def chat_completion_with_tools(
        self,
        messages: Sequence[Mapping[str, Any]],
        tools: Sequence[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        raise UnsupportedFeature(FEATURE_TOOLS, self.IDENTIFIER)

    def complete(self, prompt: str, options: Optional[Mapping[str, Any]] = None) -> CompletionResponse:
        return self.chat_completion([{"role": "user", "content": prompt}], options)

    def embeddings(
        self, inputs: Union[str, Sequence[str]], options: Optional[Mapping[str, Any]] = None
    ) -> EmbeddingResponse:
        raise UnsupportedFeature(FEATURE_EMBEDDINGS, self.IDENTIFIER)

    def analyze_image(
        self, content: List[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> VisionResponse:
        raise UnsupportedFeature(FEATURE_VISION, self.IDENTIFIER)

    def stream_chat_completion(
        self, messages: Sequence[Mapping[str, Any]], options: Optional[Mapping[str, Any]] = None
    ) -> DeltaStream:
        raise UnsupportedFeature(FEATURE_STREAMING, self.IDENTIFIER)

    def get_available_models(self) -> Dict[str, str]:
        return dict(self.STATIC_MODELS)

    def test_connection(self) -> Dict[str, Any]:
        """Probe the vendor by listing models; errors propagate to the caller."""
        models = self.get_available_models()
        return {
            "success": True,
            "message": f"Connection successful. Found {len(models)} models.",
            "models": models,
        }

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------
    def _build_url(self, endpoint: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def _auth_query(self, api_key: str) -> Dict[str, str]:
        """Query parameters carrying the credential (vendors keyed by URL)."""
        return {}

    def _extra_headers(self) -> Dict[str, str]:
        """Vendor headers added to every request (attribution, versions)."""
        return {}

    def _build_headers(self, api_key: str, stream: bool = False) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
        }
        headers.update(self._auth_headers(api_key))
        headers.update(self._extra_headers())
        return headers

    @staticmethod
    def _with_query(url: str, params: Mapping[str, str]) -> str:
        if not params:
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{urlencode(dict(params))}"

    def _build_request(
        self, endpoint: str, payload: Optional[Mapping[str, Any]], method: str, stream: bool = False
    ) -> HttpRequest:
        api_key = self._require_credentials()
        method = method.upper()
        body = None
        if method != "GET" and payload:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        return HttpRequest(
            method=method,
            url=self._with_query(self._build_url(endpoint), self._auth_query(api_key)),
            headers=self._build_headers(api_key, stream=stream),
            body=body,
        )

    # ------------------------------------------------------------------
    # Request loop
    # ------------------------------------------------------------------
    def _send_request(
        self,
        endpoint: str,
        payload: Optional[Mapping[str, Any]] = None,
        method: str = "POST",
        *,
        model: Optional[str] = None,
    ) -> Any:
        """Send one logical request through the retry loop and decode its JSON body."""
        request = self._build_request(endpoint, payload, method)
        response, attempts = self._execute(request, model=model)
        decoded = accessor.decode_json_response(response.body, provider=self.IDENTIFIER)
        normalized_log_event(
            self._logger,
            "request.ok",
            LogContext(provider=self.IDENTIFIER, model=model, extra={"method": method}),
            phase="finalize",
            attempt=attempts,
            tokens=self._reported_usage(decoded),
        )
        return decoded

    def _send_stream(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        decode: Callable[[HttpResponse, Callable[[DeltaStream], None]], DeltaStream],
        *,
        model: Optional[str] = None,
    ) -> DeltaStream:
        """Open a streaming request (start phase retried) and decode it lazily."""
        request = self._build_request(endpoint, payload, "POST", stream=True)
        response, _ = self._execute(request, model=model, stream=True)
        ctx = LogContext(provider=self.IDENTIFIER, model=model)
        normalized_log_event(self._logger, "stream.start", ctx, phase="start")
        if response.chunks is not None:
            response.chunks = self._typed_chunks(response.chunks, ctx)

        def _finish(stream: DeltaStream) -> None:
            response.close()
            normalized_log_event(
                self._logger,
                "stream.end",
                ctx,
                phase="finalize",
                emitted=stream.emitted,
                completed=stream.completed,
            )

        return decode(response, _finish)

    def _typed_chunks(self, chunks: Iterator[bytes], ctx: LogContext) -> Iterator[bytes]:
        """Re-raise a connection lost mid-stream as ``ProviderUnreachable``; never retried."""
        try:
            yield from chunks
        except TransportError as exc:
            normalized_log_event(
                self._logger,
                "stream.error",
                ctx,
                phase="stream",
                error_code=ErrorCode.UNAVAILABLE.value,
                message=str(exc),
                level=logging.WARNING,
            )
            raise ProviderUnreachable(
                f"Stream interrupted: {exc}",
                provider=self.IDENTIFIER,
                attempts=1,
                model=ctx.model,
                raw=exc,
            ) from exc

    def _log_malformed_chunk(self, model: Optional[str]) -> Callable[[str], None]:
        ctx = LogContext(provider=self.IDENTIFIER, model=model)

        def _log(payload: str) -> None:
            log_event(self._logger, "stream.decode_error", ctx, level=logging.DEBUG, size=len(payload))

        return _log

    def _execute(
        self, request: HttpRequest, *, model: Optional[str] = None, stream: bool = False
    ) -> Tuple[HttpResponse, int]:
        """Run the retry loop; return the response and the attempt that produced it."""
        max_attempts = self._config.max_retries
        ctx = LogContext(provider=self.IDENTIFIER, model=model, extra={"method": request.method})
        transport = self._get_transport()
        succeeded: List[int] = []

        @retry(
            RetryConfig(
                max_attempts=max_attempts,
                delay_base=2.0,
                multiplier=BACKOFF_BASE_SECONDS,
                retryable_codes=(ErrorCode.TRANSIENT,),
                attempt_logger=self._attempt_logger(ctx, succeeded),
            )
        )
        def _attempt() -> HttpResponse:
            return self._attempt_once(transport, request, model, stream)

        try:
            response = _attempt()
        except _AttemptFailed as exc:
            normalized_log_event(
                self._logger,
                "request.failed",
                ctx,
                phase="finalize",
                attempt=max_attempts,
                error_code=ErrorCode.UNAVAILABLE.value,
            )
            raise ProviderUnreachable(
                f"Failed to connect to provider after {max_attempts} attempts: {exc.message}",
                provider=self.IDENTIFIER,
                attempts=max_attempts,
                model=model,
                status_code=exc.status_code,
                raw=exc.raw,
            ) from exc
        except ProviderRejected as exc:
            normalized_log_event(
                self._logger,
                "request.failed",
                ctx,
                phase="finalize",
                error_code=exc.code.value,
                status=exc.status_code,
            )
            raise
        return response, succeeded[-1] if succeeded else 1

    def _attempt_once(
        self, transport: Transport, request: HttpRequest, model: Optional[str], stream: bool
    ) -> HttpResponse:
        try:
            response = transport.send(request, stream=stream)
        except TransportError as exc:
            raise _AttemptFailed(str(exc), provider=self.IDENTIFIER, raw=exc) from exc
        status = response.status_code
        if 200 <= status < 300:
            return response
        body = response.read()
        message = self._error_message_from_body(body)
        if 400 <= status < 500:
            raise ProviderRejected(
                self._rejected_message(status, message),
                provider=self.IDENTIFIER,
                status_code=status,
                model=model,
                body=body,
            )
        raise _AttemptFailed(
            f"Server returned status {status}: {message}", provider=self.IDENTIFIER, status_code=status
        )

    def _attempt_logger(self, ctx: LogContext, succeeded: List[int]):
        def _log(*, attempt: int, max_attempts: int, delay: float | None, error: ProviderError | None) -> None:
            if error is None:
                succeeded.append(attempt + 1)
                return
            normalized_log_event(
                self._logger,
                "request.attempt",
                ctx,
                phase="send",
                attempt=attempt + 1,
                error_code=error.code.value,
                max_attempts=max_attempts,
                status=getattr(error, "status_code", None),
                message=error.message,
                level=logging.WARNING,
            )
            if delay is not None:
                normalized_log_event(
                    self._logger, "request.retry", ctx, phase="backoff", attempt=attempt + 1, delay_s=delay
                )

        return _log

    # ------------------------------------------------------------------
    # Error extraction
    # ------------------------------------------------------------------
    def _extract_error_message(self, body: Any) -> str:
        """Vendor error message: ``error.message``, then ``message``, then a literal."""
        if not isinstance(body, Mapping):
            return UNKNOWN_ERROR_MESSAGE
        error = body.get("error")
        if isinstance(error, Mapping) and error:
            nested = accessor.get_nullable_string(error, "message")
            if nested is not None:
                return nested
        message = accessor.get_nullable_string(body, "message")
        if message is not None:
            return message
        return UNKNOWN_ERROR_MESSAGE

    def _error_message_from_body(self, body: bytes) -> str:
        if not body:
            return UNKNOWN_ERROR_MESSAGE
        try:
            decoded = accessor.decode_json_response(body, provider=self.IDENTIFIER)
        except ProviderError:
            return UNKNOWN_ERROR_MESSAGE
        return self._extract_error_message(decoded)

    def _rejected_message(self, status: int, message: str) -> str:
        """Hook to rewrite 4xx messages (e.g. aggregator credit errors)."""
        return message

    # ------------------------------------------------------------------
    # Response construction
    # ------------------------------------------------------------------
    def _reported_usage(self, body: Any) -> Optional[Dict[str, Any]]:
        """The vendor's own usage block from a decoded body, as logged by ``request.ok``."""
        if not isinstance(body, Mapping):
            return None
        for key in ("usage", "usageMetadata"):
            usage = body.get(key)
            if isinstance(usage, Mapping) and usage:
                return dict(usage)
        return None

    def _build_usage(self, prompt_tokens: int, completion_tokens: int) -> UsageStatistics:
        return UsageStatistics.of(prompt_tokens, completion_tokens)

    def _stamp(self, metadata: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        stamped = dict(metadata or {})
        stamped["provider"] = self.IDENTIFIER
        return stamped

    def _build_completion_response(
        self,
        content: str,
        model: str,
        usage: UsageStatistics,
        finish_reason: Optional[str] = None,
        *,
        tool_calls: Optional[List[ToolCall]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> CompletionResponse:
        return CompletionResponse(
            content=content,
            model=model,
            usage=usage,
            finish_reason=finish_reason or "stop",
            provider=self.IDENTIFIER,
            tool_calls=tool_calls or None,
            metadata=self._stamp(metadata),
        )

    def _build_embedding_response(
        self,
        embeddings: List[List[float]],
        model: str,
        usage: UsageStatistics,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> EmbeddingResponse:
        return EmbeddingResponse(
            embeddings=embeddings,
            model=model,
            usage=usage,
            provider=self.IDENTIFIER,
            metadata=self._stamp(metadata),
        )

    def _build_vision_response(
        self,
        description: str,
        model: str,
        usage: UsageStatistics,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> VisionResponse:
        return VisionResponse(
            description=description,
            model=model,
            usage=usage,
            provider=self.IDENTIFIER,
            metadata=self._stamp(metadata),
        )

    # ------------------------------------------------------------------
    # Option helpers
    # ------------------------------------------------------------------
    def _model_from(self, options: Optional[Mapping[str, Any]]) -> str:
        return accessor.get_string(options or {}, "model", "") or self.get_default_model()

    @staticmethod
    def _as_input_list(inputs: Union[str, Sequence[str]]) -> List[str]:
        if isinstance(inputs, str):
            return [inputs]
        return [accessor.as_string(i) for i in inputs]


__all__ = [
    "BaseAdapter",
    "UNKNOWN_ERROR_MESSAGE",
    "FEATURE_CHAT",
    "FEATURE_COMPLETION",
    "FEATURE_EMBEDDINGS",
    "FEATURE_VISION",
    "FEATURE_STREAMING",
    "FEATURE_TOOLS",
]
