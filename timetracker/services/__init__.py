"""
Business logic for the time tracker.

Services take an SQLAlchemy session plus the caller's access policies and
raise ``timetracker.core.errors`` exceptions on failure.
"""
