"""Builders for bucket names, storage clients and claim artifacts."""
