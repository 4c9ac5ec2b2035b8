"""Categorical vocabularies shared across the engine."""
