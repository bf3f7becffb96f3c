"""Persistence: ORM models, sessions and the user store."""
