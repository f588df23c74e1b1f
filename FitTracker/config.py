"""
Configuration module for FitTracker client.
Stores all client settings, overridable from the environment.
"""

import os
from pathlib import Path
from typing import Dict, Any


class Config:
    """Client configuration class."""

    # Backend API
    API_URL = os.environ.get("FITTRACKER_API_URL", "http://localhost:3000/api")

    # Transport timeouts (seconds)
    REQUEST_TIMEOUT = float(os.environ.get("FITTRACKER_TIMEOUT", "30"))
    CONNECT_TIMEOUT = 10

    # Credential storage
    CREDENTIAL_DIR = os.environ.get(
        "FITTRACKER_HOME", str(Path.home() / ".fittracker")
    )

    # Logging environment (development, production, testing)
    ENVIRONMENT = os.environ.get("FITTRACKER_ENV", "development")

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """Get all configuration values as a dictionary."""
        return {
            "API_URL": cls.API_URL,
            "REQUEST_TIMEOUT": cls.REQUEST_TIMEOUT,
            "CONNECT_TIMEOUT": cls.CONNECT_TIMEOUT,
            "CREDENTIAL_DIR": cls.CREDENTIAL_DIR,
            "ENVIRONMENT": cls.ENVIRONMENT,
        }


# Create config instance
config = Config()
