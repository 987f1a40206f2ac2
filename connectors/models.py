"""
This module re-exports the SlackInstallation model from the database package for use in connector-related code.
"""

from database.models import SlackInstallation  # noqa: F401

__all__ = ["SlackInstallation"]
