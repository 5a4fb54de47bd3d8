"""Utility helpers shared across StreamVibe modules."""
