"""Pass-through endpoints to the analysis service.

同期関数として定義し、FastAPI のスレッドプールで実行させる（イベントループを
塞がない）。失敗は main の例外ハンドラで 502 に変換される。
"""

from fastapi import APIRouter
from fastapi.responses import Response

from ..flows.analysis import build_analysis_flow
from ..models.analysis import (
    AnalyzeWordRequest,
    CompareTranslationsRequest,
    EvaluateSentenceRequest,
    ExtractTextRequest,
    ExtractTextResponse,
    PronunciationRequest,
    PronunciationScore,
    SentenceEvaluation,
    SpeechRequest,
    TranslationComparison,
)
from ..models.word import WordDetail

router = APIRouter(tags=["analysis"])


@router.post("/extract-text", response_model=ExtractTextResponse)
def extract_text(req: ExtractTextRequest) -> ExtractTextResponse:
    return ExtractTextResponse(text=build_analysis_flow().extract_text(req.image_base64, req.mime_type))

@router.post("/word", response_model=WordDetail)
def analyze_word(req: AnalyzeWordRequest) -> WordDetail:
    return build_analysis_flow().analyze_word(req.word, req.context)

@router.post("/sentence", response_model=SentenceEvaluation)
def evaluate_sentence(req: EvaluateSentenceRequest) -> SentenceEvaluation:
    return build_analysis_flow().evaluate_sentence(req.word, req.sentence)

@router.post("/translation", response_model=TranslationComparison)
def compare_translations(req: CompareTranslationsRequest) -> TranslationComparison:
    return build_analysis_flow().compare_translations(req.original, req.user)

@router.post("/speech", response_class=Response)
def synthesize_speech(req: SpeechRequest) -> Response:
    audio = build_analysis_flow().synthesize_speech(req.text)
    return Response(content=audio, media_type="audio/mpeg")

@router.post("/pronunciation", response_model=PronunciationScore)
def score_pronunciation(req: PronunciationRequest) -> PronunciationScore:
    return build_analysis_flow().score_pronunciation(req.audio_base64, req.target_text, req.mime_type)
