"""
Time tracker backend.

FastAPI application with project membership, live timers, manual time
entries and admin reporting.
"""
__version__ = "1.0.0"
