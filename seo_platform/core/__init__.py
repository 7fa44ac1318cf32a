"""Core layer - configuration, logging, errors, database and auth."""
