"""Core infrastructure: configuration, logging, time helpers."""
