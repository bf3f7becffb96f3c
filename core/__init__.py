"""Book collection and AI services."""
