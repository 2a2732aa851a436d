from __future__ import annotations

import json
from typing import Any, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import StoreUnavailable
from ..logging import logger
from .blob import BlobStore

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_json(blob: BlobStore, key: str) -> Optional[Any]:
    """Read and decode one blob. Unreadable or corrupt blobs yield None.

    永続層の障害でアプリ全体を止めないため、ここで StoreUnavailable と
    JSON 破損を吸収してログに残す。
    """

    try:
        raw = blob.load(key)
    except StoreUnavailable as exc:
        logger.warning("store_load_failed", key=key, error=exc.reason)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.warning("store_load_invalid", key=key, error=str(exc)[:200])
        return None


def save_json(blob: BlobStore, key: str, payload: Any) -> bool:
    """Encode and write one blob. Returns False when the store is unavailable."""

    try:
        blob.save(key, json.dumps(payload, ensure_ascii=False))
    except StoreUnavailable as exc:
        logger.warning("store_save_failed", key=key, error=exc.reason)
        return False
    return True


def validate_items(model: type[ModelT], items: Any, *, key: str) -> list[ModelT]:
    """Validate a decoded JSON list item by item, dropping invalid entries."""

    if items is None:
        return []
    if not isinstance(items, list):
        logger.warning("store_load_invalid", key=key, error="expected a list")
        return []
    out: list[ModelT] = []
    for position, item in enumerate(items):
        try:
            out.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "store_item_invalid",
                key=key,
                position=position,
                error_count=exc.error_count(),
            )
    return out


def dump_items(items: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]
