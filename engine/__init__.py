"""Core engine package for the UNO match service."""

__all__ = [
    "cards",
    "deck",
    "house_rules",
    "turns",
    "mechanics",
    "scoring",
    "errors",
    "state",
    "game",
    "rules_schema",
    "metrics",
    "service",
]
