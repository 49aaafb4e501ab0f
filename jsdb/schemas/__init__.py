"""Schemas Layer — pydantic models guarding the request boundary."""
