"""Shared schemas, errors and LLM provider adapters."""
