"""Shared infrastructure: configuration, events, exceptions, logging."""
