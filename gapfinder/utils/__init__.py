"""Shared text and number helpers."""
