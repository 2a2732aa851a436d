from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import settings
from ..errors import AnalysisServiceFailure
from ..logging import logger
from ..models.analysis import PronunciationScore, SentenceEvaluation, TranslationComparison
from ..models.word import WordDetail
from ..providers import Attachment, get_llm_provider

ResultT = TypeVar("ResultT", bound=BaseModel)

NO_TEXT_FOUND = "No text found."

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def _parse_result(operation: str, raw: str, model: type[ResultT]) -> ResultT:
    """LLM の出力を JSON として解析し、結果モデルで検証する。

    空出力・JSON 以外・スキーマ不一致はすべて AnalysisServiceFailure にする。
    """

    cleaned = _strip_fences(raw or "")
    if not cleaned:
        raise AnalysisServiceFailure(operation, "empty response")
    try:
        data: Any = json.loads(cleaned)
    except ValueError as exc:
        logger.info("analysis_parse_failed", operation=operation, preview=cleaned[:120])
        raise AnalysisServiceFailure(operation, "response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise AnalysisServiceFailure(operation, "response is not a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.info("analysis_schema_mismatch", operation=operation, error_count=exc.error_count())
        raise AnalysisServiceFailure(operation, "response does not match the expected schema") from exc


def _decode_base64(operation: str, data: str) -> bytes:
    # data URL 形式（data:audio/webm;base64,....）にも対応する
    payload = data.split(",", 1)[1] if data.startswith("data:") and "," in data else data
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AnalysisServiceFailure(operation, "payload is not valid base64") from exc


class AnalysisFlow:
    """Single-shot calls to the text/audio analysis service.

    各操作はリクエスト/レスポンスで完結し、状態を持たない。失敗は再試行せず
    呼び出し元に AnalysisServiceFailure として伝える。
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    def _call(self, operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AnalysisServiceFailure:
            raise
        except Exception as exc:
            logger.info("analysis_call_failed", operation=operation, error_type=type(exc).__name__)
            raise AnalysisServiceFailure(operation, str(exc)[:256] or type(exc).__name__) from exc

    def extract_text(self, image_base64: str, mime_type: str = "image/png") -> str:
        _decode_base64("extract_text", image_base64)
        data = image_base64.split(",", 1)[1] if image_base64.startswith("data:") else image_base64
        prompt = "Extract the English text from this image. Only provide the text itself, no explanations."
        out = self._call(
            "extract_text",
            self.llm.complete,
            prompt,
            image=Attachment(data_base64=data, mime_type=mime_type),
        )
        text = (out or "").strip()
        return text or NO_TEXT_FOUND

    def analyze_word(self, word: str, context: str) -> WordDetail:
        lang = settings.explanation_language
        prompt = (
            f'Analyze the English word "{word}" in the context of: "{context}".\n'
            f"Provide definitions and examples in BOTH English and {lang}.\n"
            "Return a JSON object with keys: word (string), phonetic (IPA string), "
            f'definitions (array of {{"en", "zh"}}), examples (array of {{"en", "zh"}}), '
            f'where "zh" holds the {lang} text.'
        )
        out = self._call("analyze_word", self.llm.complete, prompt, json_mode=True)
        return _parse_result("analyze_word", out, WordDetail)

    def evaluate_sentence(self, word: str, sentence: str) -> SentenceEvaluation:
        lang = settings.explanation_language
        prompt = (
            f'The user is practicing the word "{word}".\n'
            f'They wrote the following sentence: "{sentence}".\n'
            "Evaluate if the word is used correctly.\n"
            f"Provide feedback in {lang} and suggest a better version if necessary.\n"
            "Return a JSON object with keys: isCorrect (boolean), feedback (string), suggestion (string)."
        )
        out = self._call("evaluate_sentence", self.llm.complete, prompt, json_mode=True)
        return _parse_result("evaluate_sentence", out, SentenceEvaluation)

    def compare_translations(self, original: str, user: str) -> TranslationComparison:
        lang = settings.explanation_language
        prompt = (
            f'Original English: "{original}"\n'
            f'User\'s Translation: "{user}"\n\n'
            "Please provide:\n"
            f"1. A highly accurate {lang} translation.\n"
            "2. A professional comparison of the user's attempt versus the accurate translation, "
            "highlighting subtle nuances and grammatical points.\n"
            "Return a JSON object with keys: translation (string), comparison (string)."
        )
        out = self._call("compare_translations", self.llm.complete, prompt, json_mode=True)
        return _parse_result("compare_translations", out, TranslationComparison)

    def synthesize_speech(self, text: str) -> bytes:
        audio = self._call("synthesize_speech", self.llm.synthesize, text)
        if not audio:
            raise AnalysisServiceFailure("synthesize_speech", "empty audio")
        return audio

    def score_pronunciation(self, audio_base64: str, target_text: str, mime_type: str = "audio/webm") -> PronunciationScore:
        """Transcribe the recording, then score it against the target text."""

        audio = _decode_base64("score_pronunciation", audio_base64)
        transcription = (self._call("score_pronunciation", self.llm.transcribe, audio, mime_type=mime_type) or "").strip()
        if not transcription:
            raise AnalysisServiceFailure("score_pronunciation", "empty transcription")
        lang = settings.explanation_language
        prompt = (
            f'The user is trying to say: "{target_text}".\n'
            f'A speech recognizer heard: "{transcription}".\n'
            "Evaluate the user's pronunciation. Provide:\n"
            "1. A score from 0-100.\n"
            f"2. Specific feedback in {lang}.\n"
            "3. A list of specific words from the transcription that were mispronounced or used incorrectly.\n"
            "Return a JSON object with keys: score (number), feedback (string), corrections (array of strings)."
        )
        out = self._call("score_pronunciation", self.llm.complete, prompt, json_mode=True)
        result = _parse_result("score_pronunciation", out, PronunciationScore)
        return result.model_copy(update={"transcription": transcription})


def build_analysis_flow() -> AnalysisFlow:
    """Resolve the configured provider and wrap it in an AnalysisFlow.

    プロバイダ未設定（strict モードで API キー無し等）も解析失敗として扱う。
    """

    try:
        llm = get_llm_provider()
    except RuntimeError as exc:
        logger.warning("analysis_provider_unavailable", error=str(exc)[:256])
        raise AnalysisServiceFailure("provider", str(exc)[:256]) from exc
    return AnalysisFlow(llm)
