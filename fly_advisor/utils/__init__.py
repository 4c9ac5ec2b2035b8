"""Time and logging helpers."""
