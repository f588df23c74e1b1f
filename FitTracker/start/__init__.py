"""
Startup modules for FitTracker front-ends.
"""
