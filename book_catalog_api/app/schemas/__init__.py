"""Pydantic schemas exchanged by the API."""
