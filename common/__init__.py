"""Shared helpers: logging, commands, HTTP, archives, files, environment and host checks."""
