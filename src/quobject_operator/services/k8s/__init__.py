"""Kubernetes API access for claim objects."""
