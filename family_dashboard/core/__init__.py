"""Core infrastructure: configuration, logging, health tracking and errors."""
