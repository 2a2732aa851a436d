from .analysis import PronunciationScore, SentenceEvaluation, TranslationComparison
from .goals import DailyProgress, GoalProgress, UserGoals
from .notification import Alert, DeliveredNotification, PermissionState, TickResult
from .session import SessionContent, SessionRecord
from .word import BilingualText, VocabularyWord, WordDetail

__all__ = [
    "Alert",
    "BilingualText",
    "DailyProgress",
    "DeliveredNotification",
    "GoalProgress",
    "PermissionState",
    "PronunciationScore",
    "SentenceEvaluation",
    "SessionContent",
    "SessionRecord",
    "TickResult",
    "TranslationComparison",
    "UserGoals",
    "VocabularyWord",
    "WordDetail",
]
