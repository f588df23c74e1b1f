"""
Authentication module for FitTracker front-ends.
Handles login, registration, logout and profile updates.
"""

from .auth_flow import AuthFlow, AuthResult

__all__ = ['AuthFlow', 'AuthResult']
