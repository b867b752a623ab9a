"""
Handlers package for front-end facing entry points.
"""
from .actions import handler

__all__ = ["handler"]
