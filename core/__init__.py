"""
Core Domain Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models

Exports:
    models: VideoAsset, TargetProfile, RemoteJob, pass results
    logic: Transitions, reconciliation decisions, output locations
"""

from . import models
from . import logic

__all__ = ['models', 'logic']
