"""Pytest configuration: in-memory store, local analysis provider, no background ticker."""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 設定はモジュール import 時に確定するため、最初に環境変数を整える。
os.environ.setdefault("STRICT_MODE", "false")
os.environ.setdefault("LLM_PROVIDER", "local")
os.environ.setdefault("REVIEW_TICKER_ENABLED", "false")
os.environ.setdefault("LINGUIST_DB_PATH", ":memory:")

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def t0() -> datetime:
    return T0
