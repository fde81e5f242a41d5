"""Core application modules: configuration, database and security."""
