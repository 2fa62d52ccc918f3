"""
CampusEats kitchen backend.

Order lifecycle management and kitchen analytics for the campus food-ordering
platform.
"""

__version__ = "1.0.0"
