"""Logging, I/O, drawing and timing helpers."""
