"""Domain layer for SignFlow.

Models, errors and pure rules. Nothing in this package performs I/O.
"""
