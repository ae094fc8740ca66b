import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

DIFFICULTY_QUESTIONS = {
    "easy": 3,
    "medium": 5,
    "hard": 10,
}
DEFAULT_QUESTIONS = 5
PROFILE_POOL_SIZE = 100


def questions_for(difficulty: str) -> int:
    return DIFFICULTY_QUESTIONS.get(difficulty, DEFAULT_QUESTIONS)


def accuracy(correct: int, questions: int) -> int:
    # half-up, so 12.5 reads as 13
    return math.floor(correct / questions * 100 + 0.5) if questions > 0 else 0


@dataclass
class PlayerStats:
    user_id: str
    total_games: int = 0
    total_correct: int = 0
    total_questions: int = 0

    @property
    def accuracy_percentage(self) -> int:
        return accuracy(self.total_correct, self.total_questions)


def _get(row: Any, name: str):
    if isinstance(row, Mapping):
        return row[name]
    return getattr(row, name)


def aggregate_results(results: Iterable[Any]) -> dict[str, PlayerStats]:
    """Fold game result rows into per-user stats, keyed by user id in first-seen order."""
    stats: dict[str, PlayerStats] = {}
    for r in results:
        user_id = _get(r, "user_id")
        s = stats.setdefault(user_id, PlayerStats(user_id=user_id))
        s.total_games += 1
        s.total_correct += int(_get(r, "score"))
        s.total_questions += int(_get(r, "total_questions"))
    return stats


def fallback_nickname(user_id: str) -> str:
    return f"Player {user_id[:8]}"


def build_leaderboard(results: Iterable[Any], nicknames: Mapping[str, Optional[str]]) -> list[dict]:
    entries = []
    for user_id, s in aggregate_results(results).items():
        entries.append({
            "user_id": user_id,
            "nickname": nicknames.get(user_id) or fallback_nickname(user_id),
            "total_games": s.total_games,
            "total_correct": s.total_correct,
            "total_questions": s.total_questions,
            "accuracy_percentage": s.accuracy_percentage,
        })

    # most correct answers first, then best accuracy
    entries.sort(key=lambda e: (-e["total_correct"], -e["accuracy_percentage"]))
    return entries
