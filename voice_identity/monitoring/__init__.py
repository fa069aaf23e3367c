"""Operational monitoring of refinement quality."""

from .drift import DriftMonitor

__all__ = ["DriftMonitor"]
