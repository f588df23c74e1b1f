"""
Tests for the FitTracker client core.
"""
