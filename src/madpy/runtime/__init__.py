"""Process-level orchestration."""

from madpy.runtime.pipeline import Pipeline

__all__ = ["Pipeline"]
