"""解析サービス（LLM）プロバイダの共有ステートと公開APIを管理するパッケージ。"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any

# LLM クライアントのシングルトン。オーバーライド付き呼び出しでは再生成される。
_LLM_INSTANCE: Any | None = None
# LLM 呼び出しをタイムアウト制御付きで実行するためのスレッドプール。
_llm_executor: ThreadPoolExecutor = ThreadPoolExecutor(max_workers=4)


def _get_llm_instance() -> Any | None:
    return _LLM_INSTANCE


def _set_llm_instance(instance: Any | None) -> None:
    """LLM シングルトンを更新する。テストでは None へ戻し再初期化する。"""

    global _LLM_INSTANCE
    _LLM_INSTANCE = instance


def _get_llm_executor() -> ThreadPoolExecutor:
    return _llm_executor


def _replace_llm_executor() -> ThreadPoolExecutor:
    """現在のプールを返し、以降の呼び出し用に新しいプールへ差し替える。"""

    global _llm_executor
    previous = _llm_executor
    _llm_executor = ThreadPoolExecutor(max_workers=4)
    return previous


from .llm import Attachment, get_llm_provider, shutdown_providers

__all__ = [
    "Attachment",
    "get_llm_provider",
    "shutdown_providers",
]
