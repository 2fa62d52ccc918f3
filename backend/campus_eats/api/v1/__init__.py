"""
API v1 package initialization.

This module initializes the v1 API package for the CampusEats kitchen API.
"""

from campus_eats.api.v1.kitchen import router as kitchen_router

__all__ = ["kitchen_router"]
