"""Star rating for a solved level."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import LevelConfig
    from .engine import CompletionEvent

THREE_STAR_SCORE = 80
TWO_STAR_SCORE = 50


@dataclass(frozen=True)
class ScoreCard:
    total_path_length: int
    par: int
    undo_count: int
    efficiency_ratio: float
    efficiency_points: float  # up to 70
    undo_points: float        # up to 30
    score: float
    stars: int


def stars_for_score(score: float) -> int:
    if score >= THREE_STAR_SCORE:
        return 3
    if score >= TWO_STAR_SCORE:
        return 2
    return 1


def score_attempt(total_path_length: int, undo_count: int,
                  par: int, undo_bonus: int) -> ScoreCard:
    """
    Score a solution from 0 to 100 and convert it to 1-3 stars.

    Efficiency (par / total length) is worth up to 70 points: 50 for
    meeting par plus up to 20 for beating it, scaled down linearly when
    over par. Undo discipline is worth 30 points, minus 10 per undo beyond
    the level's allowance.
    """
    if total_path_length <= 0:
        raise ValueError("A solved level has a positive total path length")

    ratio = par / total_path_length
    if ratio >= 1:
        efficiency_points = 50 + min(20.0, (ratio - 1) * 40)
    else:
        efficiency_points = max(0.0, ratio * 50)

    undo_penalty = max(0, undo_count - undo_bonus)
    undo_points = max(0, 30 - undo_penalty * 10)

    score = efficiency_points + undo_points
    return ScoreCard(total_path_length=total_path_length,
                     par=par,
                     undo_count=undo_count,
                     efficiency_ratio=ratio,
                     efficiency_points=efficiency_points,
                     undo_points=undo_points,
                     score=score,
                     stars=stars_for_score(score))


def score_completion(completion: "CompletionEvent", level: "LevelConfig") -> ScoreCard:
    """Score a finished run; only successful runs are rated."""
    if not completion.success:
        raise ValueError("Only successful runs can be scored")
    return score_attempt(completion.total_path_length, completion.undo_count,
                         level.par, level.undo_bonus)
