"""Render sink implementations."""
