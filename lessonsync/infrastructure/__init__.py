"""Adapters for external services and the factories that select them."""
