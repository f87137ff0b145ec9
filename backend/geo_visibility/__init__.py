"""AI answer-engine visibility scoring and competitor resolution service."""

__version__ = "0.1.0"
