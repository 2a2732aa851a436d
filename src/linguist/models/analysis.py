from __future__ import annotations

from pydantic import AliasChoices, Field

from .common import ApiModel


class SentenceEvaluation(ApiModel):
    is_correct: bool
    feedback: str
    suggestion: str = ""


class TranslationComparison(ApiModel):
    translation: str = Field(validation_alias=AliasChoices("translation", "aiTranslation", "ai_translation"))
    comparison: str


class PronunciationScore(ApiModel):
    score: float = Field(ge=0, le=100)
    feedback: str
    transcription: str = ""
    corrections: list[str] = Field(default_factory=list)


# --- request bodies ---


class ExtractTextRequest(ApiModel):
    image_base64: str = Field(min_length=1)
    mime_type: str = "image/png"


class ExtractTextResponse(ApiModel):
    text: str


class AnalyzeWordRequest(ApiModel):
    word: str = Field(min_length=1, max_length=64)
    context: str = ""


class EvaluateSentenceRequest(ApiModel):
    word: str = Field(min_length=1, max_length=64)
    sentence: str = Field(min_length=1)


class CompareTranslationsRequest(ApiModel):
    original: str = Field(min_length=1)
    user: str = Field(min_length=1)


class SpeechRequest(ApiModel):
    text: str = Field(min_length=1, max_length=2000)


class PronunciationRequest(ApiModel):
    audio_base64: str = Field(min_length=1)
    target_text: str = Field(min_length=1)
    mime_type: str = "audio/webm"
