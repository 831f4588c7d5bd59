"""Shared pydantic schemas for the NCT Framework API."""
