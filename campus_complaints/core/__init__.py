# campus_complaints/core/__init__.py
"""
Core infrastructure: settings, logging, constants, errors and middleware.
"""
