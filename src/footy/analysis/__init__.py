"""Batch analysis and sync orchestration."""

from footy.analysis.pipeline import (
    BatchResult,
    MatchFailure,
    analyze_match,
    analyze_matches,
    load_candidate_matches,
    run_analysis,
    run_sync,
)

__all__ = [
    "BatchResult",
    "MatchFailure",
    "analyze_match",
    "analyze_matches",
    "load_candidate_matches",
    "run_analysis",
    "run_sync",
]
