"""
Core package for shared utilities.

Configuration and structured logging shared by the services and the API
layer.
"""
