"""Packaged JSON Schema documents."""
