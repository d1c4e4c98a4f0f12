"""VenkyAI - session and streaming event orchestrator for a live conversation assistant."""

__version__ = "0.1.0"
