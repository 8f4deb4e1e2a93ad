"""
Utility modules for poly_slicer.

Modules:
- geometry: 2-D vector primitives and polygon area/centroid helpers
- logging_utils: Logging setup
"""

from . import geometry
from . import logging_utils

__all__ = ['geometry', 'logging_utils']
