import base64
import json

import pytest

from linguist.errors import AnalysisServiceFailure
from linguist.flows.analysis import NO_TEXT_FOUND, AnalysisFlow


class FakeLLM:
    """Scripted analysis client: returns queued outputs in order."""

    def __init__(self, *outputs, transcript="", audio=b"ID3"):
        self.outputs = list(outputs)
        self.transcript = transcript
        self.audio = audio
        self.prompts = []
        self.images = []

    def complete(self, prompt, *, image=None, json_mode=False):
        self.prompts.append(prompt)
        self.images.append(image)
        out = self.outputs.pop(0)
        if isinstance(out, Exception):
            raise out
        return out

    def synthesize(self, text, *, voice=None):
        return self.audio

    def transcribe(self, audio, *, mime_type="audio/webm"):
        return self.transcript


AUDIO_B64 = base64.b64encode(b"fake-audio").decode()


def test_extract_text_passes_image_and_trims():
    llm = FakeLLM("  The cat sat.  ")
    flow = AnalysisFlow(llm)
    assert flow.extract_text("data:image/jpeg;base64," + AUDIO_B64, "image/jpeg") == "The cat sat."
    assert llm.images[0].mime_type == "image/jpeg"
    assert llm.images[0].data_base64 == AUDIO_B64


def test_extract_text_empty_output_means_no_text():
    assert AnalysisFlow(FakeLLM("")).extract_text(AUDIO_B64) == NO_TEXT_FOUND


def test_extract_text_rejects_invalid_base64():
    with pytest.raises(AnalysisServiceFailure):
        AnalysisFlow(FakeLLM("x")).extract_text("%%%not-base64%%%")


def test_analyze_word_accepts_fenced_json():
    payload = {
        "word": "fox",
        "phonetic": "/fɒks/",
        "definitions": [{"en": "a wild animal", "zh": "狐狸"}],
        "examples": [{"en": "The fox ran.", "zh": "狐狸跑了。"}],
    }
    flow = AnalysisFlow(FakeLLM("```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```"))
    detail = flow.analyze_word("fox", "The quick brown fox.")
    assert detail.word == "fox"
    assert detail.definitions[0].zh == "狐狸"


def test_evaluate_sentence_reads_camel_case_keys():
    flow = AnalysisFlow(FakeLLM(json.dumps({"isCorrect": True, "feedback": "很好"})))
    result = flow.evaluate_sentence("fox", "A fox jumped.")
    assert result.is_correct is True
    assert result.suggestion == ""


def test_compare_translations_accepts_legacy_key():
    flow = AnalysisFlow(FakeLLM(json.dumps({"aiTranslation": "快速的棕色狐狸", "comparison": "ok"})))
    assert flow.compare_translations("quick brown fox", "快狐狸").translation == "快速的棕色狐狸"


@pytest.mark.parametrize(
    "raw",
    ["", "not json at all", "[1, 2]", json.dumps({"feedback": "missing isCorrect"})],
)
def test_bad_outputs_raise_analysis_failure(raw):
    with pytest.raises(AnalysisServiceFailure) as excinfo:
        AnalysisFlow(FakeLLM(raw)).evaluate_sentence("fox", "A fox.")
    assert excinfo.value.operation == "evaluate_sentence"


def test_client_errors_are_wrapped():
    flow = AnalysisFlow(FakeLLM(RuntimeError("LLM failure (reason_code=TIMEOUT)")))
    with pytest.raises(AnalysisServiceFailure) as excinfo:
        flow.analyze_word("fox", "")
    assert "TIMEOUT" in excinfo.value.reason


def test_synthesize_speech_requires_audio():
    assert AnalysisFlow(FakeLLM()).synthesize_speech("hello") == b"ID3"
    with pytest.raises(AnalysisServiceFailure):
        AnalysisFlow(FakeLLM(audio=b"")).synthesize_speech("hello")


def test_score_pronunciation_uses_recognizer_transcript():
    llm = FakeLLM(
        json.dumps({"score": 82, "feedback": "不错", "transcription": "ignored", "corrections": ["fox"]}),
        transcript="the quick brown box",
    )
    result = AnalysisFlow(llm).score_pronunciation(AUDIO_B64, "the quick brown fox")
    assert result.score == 82
    assert result.transcription == "the quick brown box"
    assert result.corrections == ["fox"]
    assert "the quick brown box" in llm.prompts[0]


def test_score_pronunciation_without_transcript_fails():
    with pytest.raises(AnalysisServiceFailure):
        AnalysisFlow(FakeLLM(transcript="")).score_pronunciation(AUDIO_B64, "hello")


def test_score_out_of_range_is_rejected():
    llm = FakeLLM(json.dumps({"score": 140, "feedback": "?"}), transcript="hello")
    with pytest.raises(AnalysisServiceFailure):
        AnalysisFlow(llm).score_pronunciation(AUDIO_B64, "hello")
