"""Configuration, security, logging and error handling."""
