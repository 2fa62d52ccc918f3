"""Kitchen domain services."""
