# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses used across scanning, optimisation, and serving layers.

from .domain import DerivativeMarkers, Dimensions, ImageEntry, WorkItem, WorkResult

__all__ = ["DerivativeMarkers", "Dimensions", "ImageEntry", "WorkItem", "WorkResult"]
