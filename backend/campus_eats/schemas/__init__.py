"""Pydantic schemas for the kitchen API."""
