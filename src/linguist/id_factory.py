"""ID 生成ユーティリティ。

学習セッションと通知の ID は衝突しないよう UUID を用い、種別が一目で
分かるよう prefix を付ける。
"""

from __future__ import annotations

import uuid


def generate_session_id() -> str:
    return f"ls:{uuid.uuid4().hex}"


def generate_notification_id() -> str:
    return f"nt:{uuid.uuid4().hex}"
