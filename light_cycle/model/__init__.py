"""Model package for Light Cycle path authoring and simulation."""

from .colors import Color, mix_colors, blend
from .grid import Cell, Direction, GridMap
from .pathfinding import find_path, manhattan
from .authoring import (EditError, EditResult, Path, PathAuthor,
                        PathExtensionPolicy, ManualPolicy, AssistedPolicy,
                        MANUAL, ASSISTED, policy_named)
from .junction import Junction, JunctionRegistry, PathVisit
from .collision import CollisionKind, Heading, classify_collision
from .agent import Agent, AgentState
from .state import AgentSnapshot, EventKind, SimulationEvent, SimulationState
from .engine import CompletionEvent, FailureReason, RunOutcome, SimulationEngine
from .scoring import ScoreCard, score_attempt, score_completion
from .session import PuzzleSession

__all__ = [
    'Color',
    'mix_colors',
    'blend',
    'Cell',
    'Direction',
    'GridMap',
    'find_path',
    'manhattan',
    'EditError',
    'EditResult',
    'Path',
    'PathAuthor',
    'PathExtensionPolicy',
    'ManualPolicy',
    'AssistedPolicy',
    'MANUAL',
    'ASSISTED',
    'policy_named',
    'Junction',
    'JunctionRegistry',
    'PathVisit',
    'CollisionKind',
    'Heading',
    'classify_collision',
    'Agent',
    'AgentState',
    'AgentSnapshot',
    'EventKind',
    'SimulationEvent',
    'SimulationState',
    'CompletionEvent',
    'FailureReason',
    'RunOutcome',
    'SimulationEngine',
    'ScoreCard',
    'score_attempt',
    'score_completion',
    'PuzzleSession',
]
