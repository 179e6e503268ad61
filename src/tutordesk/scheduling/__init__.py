"""Session scheduling."""

from .generator import GenerationResult, candidate_ranges, generate_sessions, is_holiday

__all__ = ["GenerationResult", "candidate_ranges", "generate_sessions", "is_holiday"]
