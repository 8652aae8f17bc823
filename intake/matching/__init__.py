"""Email subject to job posting matching."""
from .job_matcher import JobMatcher

__all__ = ["JobMatcher"]
