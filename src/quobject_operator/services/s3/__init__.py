"""Storage backend protocol."""
