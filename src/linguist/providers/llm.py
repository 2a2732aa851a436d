"""LLM プロバイダ（テキスト・画像・音声）を司るモジュール。"""

from __future__ import annotations

import contextvars
import time
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from openai import OpenAI

from ..config import settings
from ..logging import logger
from . import _get_llm_executor, _get_llm_instance, _replace_llm_executor, _set_llm_instance

T = TypeVar("T")


@dataclass(frozen=True)
class Attachment:
    """Base64 encoded binary input (image) sent alongside a prompt."""

    data_base64: str
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_base64}"


class _LLMBase:
    """LLM クライアントが実装すべき最小インターフェース。"""

    name = "base"

    def complete(self, prompt: str, *, image: Optional[Attachment] = None, json_mode: bool = False) -> str:  # pragma: no cover - interface definition
        raise NotImplementedError

    def synthesize(self, text: str, *, voice: Optional[str] = None) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def transcribe(self, audio: bytes, *, mime_type: str = "audio/webm") -> str:  # pragma: no cover
        raise NotImplementedError


class _LocalEchoLLM(_LLMBase):
    """外部依存が利用できない環境でのフォールバック。常に空の出力を返す。"""

    name = "local"

    def complete(self, prompt: str, *, image: Optional[Attachment] = None, json_mode: bool = False) -> str:
        logger.info("llm_complete_call", provider="local", model="echo", prompt_chars=len(prompt))
        return ""

    def synthesize(self, text: str, *, voice: Optional[str] = None) -> bytes:
        logger.info("llm_speech_call", provider="local", text_chars=len(text))
        return b""

    def transcribe(self, audio: bytes, *, mime_type: str = "audio/webm") -> str:
        logger.info("llm_transcribe_call", provider="local", audio_bytes=len(audio))
        return ""


_AUDIO_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
    "audio/ogg": "ogg",
}


class _OpenAILLM(_LLMBase):  # pragma: no cover - オンライン利用が前提
    """OpenAI Responses/Audio API を利用するラッパー。"""

    name = "openai"

    def __init__(self, *, api_key: str, model: str, temperature: float | None = None) -> None:
        self._client = OpenAI(api_key=api_key)
        self._model = model
        self._temperature = 0.2 if temperature is None else float(max(0.0, min(1.0, temperature)))

    def _extract_text(self, resp: Any) -> str:
        txt = getattr(resp, "output_text", None)
        if isinstance(txt, str):
            return txt.strip()
        return (str(resp) or "").strip()

    def complete(self, prompt: str, *, image: Optional[Attachment] = None, json_mode: bool = False) -> str:
        logger.info(
            "llm_complete_call",
            provider="openai",
            model=self._model,
            prompt_chars=len(prompt),
            with_image=image is not None,
            json_mode=json_mode,
        )
        content: list[dict[str, Any]] = [{"type": "input_text", "text": prompt}]
        if image is not None:
            content.append({"type": "input_image", "image_url": image.data_url})
        kwargs: dict[str, Any] = {
            "model": self._model,
            "input": [{"role": "user", "content": content}],
            "temperature": self._temperature,
            "max_output_tokens": settings.llm_max_tokens,
            "timeout": settings.llm_timeout_ms / 1000.0,
        }
        if json_mode:
            kwargs["text"] = {"format": {"type": "json_object"}}
        resp = self._client.responses.create(**kwargs)
        out = self._extract_text(resp)
        logger.info("llm_complete_result", provider="openai", model=self._model, content_chars=len(out))
        return out

    def synthesize(self, text: str, *, voice: Optional[str] = None) -> bytes:
        logger.info("llm_speech_call", provider="openai", model=settings.tts_model, text_chars=len(text))
        resp = self._client.audio.speech.create(
            model=settings.tts_model,
            voice=voice or settings.tts_voice,
            input=text,
            response_format="mp3",
        )
        return resp.read()

    def transcribe(self, audio: bytes, *, mime_type: str = "audio/webm") -> str:
        logger.info(
            "llm_transcribe_call",
            provider="openai",
            model=settings.transcription_model,
            audio_bytes=len(audio),
        )
        ext = _AUDIO_EXTENSIONS.get(mime_type.split(";")[0].strip().lower(), "webm")
        resp = self._client.audio.transcriptions.create(
            model=settings.transcription_model,
            file=(f"speech.{ext}", audio, mime_type),
        )
        return (getattr(resp, "text", "") or "").strip()


def _classify_failure(exc: Exception | None) -> str:
    """例外内容から失敗理由コードを推定する（ログ・エラーメッセージ用）。"""

    if exc is None:
        return "UNKNOWN"
    low = (str(exc) or "").lower()
    etype = type(exc).__name__.lower()
    if isinstance(exc, FuturesTimeout) or "timeout" in low or "timeout" in etype:
        return "TIMEOUT"
    if "rate limit" in low or "too many requests" in low or "429" in low or "ratelimit" in etype:
        return "RATE_LIMIT"
    if "invalid api key" in low or "unauthorized" in low or "401" in low or "authentication" in etype:
        return "AUTH"
    return "UNKNOWN"


class _PolicyLLM(_LLMBase):
    """タイムアウトとリトライを付与した LLM ラッパー。"""

    def __init__(self, inner: _LLMBase) -> None:
        self._inner = inner
        self.name = inner.name

    def _run(self, operation: str, func: Callable[[], T], empty: T) -> T:
        executor = _get_llm_executor()
        attempts = max(1, settings.llm_max_retries)
        last_exc: Exception | None = None
        for attempt in range(1, attempts + 1):
            future = None
            try:
                ctx = contextvars.copy_context()
                future = executor.submit(ctx.run, func)
                return future.result(timeout=settings.llm_timeout_ms / 1000.0)
            except Exception as exc:
                last_exc = exc
                logger.info(
                    "llm_complete_error",
                    operation=operation,
                    attempt=attempt,
                    retries=attempts,
                    error_type=type(exc).__name__,
                    error=str(exc)[:256],
                )
                if future is not None:
                    future.cancel()
                if attempt >= attempts:
                    break
                time.sleep(0.1 * attempt)
        reason_code = _classify_failure(last_exc)
        logger.info(
            "llm_complete_failed_all_retries",
            operation=operation,
            reason_code=reason_code,
            error_type=(type(last_exc).__name__ if last_exc else None),
        )
        if settings.strict_mode:
            detail = (str(last_exc) or "")[:256] if last_exc else ""
            raise RuntimeError(f"LLM failure (operation={operation}, reason_code={reason_code}, detail={detail})")
        return empty

    def complete(self, prompt: str, *, image: Optional[Attachment] = None, json_mode: bool = False) -> str:
        return self._run("complete", lambda: self._inner.complete(prompt, image=image, json_mode=json_mode), "")

    def synthesize(self, text: str, *, voice: Optional[str] = None) -> bytes:
        return self._run("synthesize", lambda: self._inner.synthesize(text, voice=voice), b"")

    def transcribe(self, audio: bytes, *, mime_type: str = "audio/webm") -> str:
        return self._run("transcribe", lambda: self._inner.transcribe(audio, mime_type=mime_type), "")


def _local_fallback(reason: str) -> _LLMBase:
    logger.info("llm_provider_select", provider="local", reason=reason)
    wrapped = _PolicyLLM(_LocalEchoLLM())
    _set_llm_instance(wrapped)
    return wrapped


def get_llm_provider() -> Any:
    """設定値に応じた LLM クライアントを返す（プロセス内シングルトン）。"""

    instance = _get_llm_instance()
    if instance is not None:
        return instance

    provider = (settings.llm_provider or "").lower()
    if provider in {"", "local"}:
        if settings.strict_mode:
            raise RuntimeError("LLM_PROVIDER must be 'openai' in strict mode")
        return _local_fallback("configured")

    if provider == "openai":
        api_key = settings.openai_api_key
        if not api_key:
            if settings.strict_mode:
                raise RuntimeError("OPENAI_API_KEY is required for LLM_PROVIDER=openai (strict mode)")
            return _local_fallback("missing_api_key")
        logger.info("llm_provider_select", provider="openai", model=settings.llm_model)
        wrapped = _PolicyLLM(_OpenAILLM(api_key=api_key, model=settings.llm_model))
        _set_llm_instance(wrapped)
        return wrapped

    if settings.strict_mode:
        raise RuntimeError(f"Unknown LLM provider: {provider}")
    return _local_fallback(f"unknown_provider:{provider}")


def shutdown_providers() -> None:
    """共有スレッドプールと LLM シングルトンを解放する。"""

    executor = _replace_llm_executor()
    executor.shutdown(wait=False, cancel_futures=True)
    _set_llm_instance(None)
