"""Route group exports."""

from . import health, planner

__all__ = ["health", "planner"]
