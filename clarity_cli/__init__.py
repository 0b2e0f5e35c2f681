"""Clarity CLI: render codebase structure, call graphs and layers as diagrams."""

__version__ = "0.3.0"
