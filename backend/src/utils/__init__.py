"""
Utility modules for the clinic management backend.

This package contains shared utility functions and helpers used across
the application, including Brasília datetime and month-period helpers.
"""
