"""
Core components of the FitTracker client.
"""
