"""
Pydantic schemas for API request/response validation.

Provides data models for authentication, users, projects, time entries
and reports. JSON keys are camelCase.
"""
