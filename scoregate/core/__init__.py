"""Core infrastructure: exceptions, structured logging and settings."""
