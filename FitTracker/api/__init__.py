"""
HTTP access to the FitTracker backend.
"""

from .client import FitTrackerAPIClient
from .pipeline import RequestPipeline

__all__ = ["FitTrackerAPIClient", "RequestPipeline"]
