"""Embed resolution engine."""
