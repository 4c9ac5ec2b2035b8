"""Fly Advisor: condition-driven fly pattern recommendations."""

__version__ = "0.1.0"
