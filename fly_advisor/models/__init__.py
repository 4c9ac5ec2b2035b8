"""Frozen pydantic domain models."""
