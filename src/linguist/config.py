from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_DB_PATH = ".data/linguist.sqlite3"
DEFAULT_REVIEW_INTERVALS: tuple[int, ...] = (1, 2, 4, 7, 15, 30)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - environment: 実行環境（development/staging/production など）
    - llm_provider: 解析サービスに利用する LLM プロバイダ
    - review_intervals: 忘却曲線に沿った復習間隔（日数）
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    llm_provider: str = Field(
        default="openai",
        description="LLM service provider / 利用するLLMプロバイダ",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="LLM model name for text and image analysis / 解析用LLMモデル名",
    )
    tts_model: str = Field(
        default="gpt-4o-mini-tts",
        description="Speech synthesis model / 音声合成モデル名",
    )
    tts_voice: str = Field(
        default="alloy",
        description="Speech synthesis voice / 音声合成の話者",
    )
    transcription_model: str = Field(
        default="whisper-1",
        description="Audio transcription model / 文字起こしモデル名",
    )
    explanation_language: str = Field(
        default="Simplified Chinese",
        description="Language used for translations and feedback / 訳文・講評の言語",
    )

    # --- LLM 呼出しのタイムアウト/リトライ ---
    llm_timeout_ms: int = Field(
        default=60000,
        description="Per-attempt timeout for LLM calls (ms) / LLM呼出しの試行毎タイムアウト(ms)",
    )
    llm_max_retries: int = Field(
        default=1,
        description="Max attempts for LLM calls / LLM呼出しの最大試行回数",
    )
    llm_max_tokens: int = Field(
        default=900,
        description="Max tokens for LLM completion output / LLM出力の最大トークン数",
    )

    # --- API Keys ---
    openai_api_key: str | None = Field(default=None, description="OpenAI API Key")

    # --- データ永続化設定 ---
    linguist_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to SQLite blob store (':memory:' keeps data in process) / 永続化用SQLite DBパス",
    )

    # --- 復習スケジュール ---
    review_intervals: Annotated[tuple[int, ...], NoDecode] = Field(
        default=DEFAULT_REVIEW_INTERVALS,
        description="Days until next review per stage / 段階ごとの次回復習までの日数",
    )
    review_tick_seconds: int = Field(
        default=60,
        ge=1,
        description="Interval of the due-review check (seconds) / 復習期限チェックの間隔（秒）",
    )
    review_ticker_enabled: bool = Field(
        default=True,
        description="Run the due-review check in the background / 期限チェックをバックグラウンドで実行",
    )
    local_timezone: str | None = Field(
        default=None,
        description="IANA time zone for day boundaries (host local time if unset) / 日付境界のタイムゾーン",
    )

    # --- 学習目標 ---
    daily_new_words_goal: int = Field(
        default=5,
        description="Default daily goal for new vocabulary / 1日の新語目標",
    )
    daily_reviews_goal: int = Field(
        default=10,
        description="Default daily goal for completed reviews / 1日の復習目標",
    )

    # --- 通知 ---
    notification_title: str = Field(
        default="LinguistPro: 学习时间到！",
        description="Title of the due-review alert / 復習通知のタイトル",
    )
    notification_body: str = Field(
        default="你有 {count} 项内容待复习。点击开始学习！",
        description="Body of the due-review alert; {count} is replaced / 復習通知の本文",
    )
    notification_tag: str = Field(
        default="linguist-review",
        description="Dedup tag for the due-review alert / 通知の重複抑止タグ",
    )

    # --- Strict mode ---
    strict_mode: bool = Field(
        default=True,
        description="Fail fast on missing/invalid configuration (disable only for tests)",
    )

    # Pydantic v2 settings config
    # - env_file: .env を読み込む
    # - extra: .env に存在する未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("review_intervals", mode="before")
    @classmethod
    def _parse_review_intervals(cls, value: object) -> object:
        """カンマ区切り文字列（例: "1,2,4,7"）を整数タプルへ変換する。"""

        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",")]
            return tuple(int(part) for part in parts if part)
        return value

    @field_validator("review_intervals")
    @classmethod
    def _validate_review_intervals(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("review_intervals must not be empty")
        if any(days <= 0 for days in value):
            raise ValueError("review_intervals must be positive")
        if any(later < earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("review_intervals must be non-decreasing")
        return value


settings = Settings()
