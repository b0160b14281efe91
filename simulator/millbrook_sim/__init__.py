"""Millbrook Game settlement engine — core package."""

__version__ = "0.1.0"

from .engine import MatchEngine, hole_summary, is_double_available, trailing_team
from .state import MatchState, MatchOptions, Player
from .runner import MatchSession, run_match, run_batch, MatchResult, ParScoreSource
