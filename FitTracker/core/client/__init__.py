"""
Front-end facing pieces of the FitTracker client core.
"""

from .auth import AuthFlow, AuthResult
from .navigator import Navigator, ScreenGraph, screen_graph_for

__all__ = [
    'AuthFlow',
    'AuthResult',
    'Navigator',
    'ScreenGraph',
    'screen_graph_for',
]
