"""Pydantic domain models for StreamVibe."""
