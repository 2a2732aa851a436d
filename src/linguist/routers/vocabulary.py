from fastapi import APIRouter, HTTPException

from ..models.word import VocabularyWord, WordDetail
from ..srs.service import review_service

router = APIRouter(tags=["vocabulary"])


@router.get("", response_model=list[VocabularyWord], summary="生词本（新しい順）")
async def list_words() -> list[VocabularyWord]:
    return review_service.vocabulary.snapshot()


@router.post("", response_model=VocabularyWord, summary="単語を生词本に追加（重複は既存を返す）")
async def add_word(detail: WordDetail) -> VocabularyWord:
    try:
        return review_service.add_word(detail)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{word}")
async def remove_word(word: str) -> dict[str, bool]:
    if not review_service.remove_word(word):
        raise HTTPException(status_code=404, detail="word not found")
    return {"removed": True}


@router.post("/{word}/practiced", response_model=VocabularyWord)
async def mark_practiced(word: str) -> VocabularyWord:
    entry = review_service.mark_practiced(word)
    if entry is None:
        raise HTTPException(status_code=404, detail="word not found")
    return entry
