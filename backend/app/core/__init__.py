"""Core infrastructure: configuration, logging, database, security, errors."""
