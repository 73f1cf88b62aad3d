"""Helpers for testing the runner itself."""
