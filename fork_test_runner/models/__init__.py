"""Data models shared by the runner components."""
