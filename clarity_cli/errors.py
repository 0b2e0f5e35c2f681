"""Exception types raised across the Clarity CLI package."""

from __future__ import annotations


class ClarityError(Exception):
    """Base class for all Clarity errors."""


class IngestionError(ClarityError):
    """A dataset file could not be parsed or did not match its schema."""

    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message


class ClassificationError(ClarityError):
    """The entry-point classification request failed."""
