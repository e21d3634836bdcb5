"""Spaced repetition scheduling and category session tracking for word learning."""
