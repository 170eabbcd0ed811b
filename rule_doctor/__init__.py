"""rule-doctor: static analysis and health scoring for agent rule documents."""

__version__ = "0.4.0"
