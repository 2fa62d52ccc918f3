"""
Database package initialization.

The package follows a modular structure:
- base: Declarative base and common mixins
- connection: Async engine and session management
- models: SQLAlchemy ORM models for orders, order items, menu items and users
"""

__all__ = []
