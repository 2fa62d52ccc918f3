"""
Order lifecycle package.

Status enum and transition table, the order state machine, its repository and
the kitchen order service.
"""
