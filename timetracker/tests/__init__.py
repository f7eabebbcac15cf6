"""
Test package for the time tracker backend.

Covers authentication, project membership scoping, the time entry
lifecycle and the summary report against an in-memory database.
"""
