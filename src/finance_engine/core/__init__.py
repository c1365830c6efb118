"""Data model and calendar helpers."""
