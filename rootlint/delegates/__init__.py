"""Subsystems that individual rules delegate to.

Each returns a structured value on success and raises on failure; the
engine treats any exception as an execution failure of the calling rule.
"""
