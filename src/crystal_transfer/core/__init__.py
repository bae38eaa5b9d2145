"""Core infrastructure: configuration, logging, hashing and store access."""
