"""Base S3 storage backend interface."""

from __future__ import annotations

from typing import Protocol


class StorageBackend(Protocol):
    """Protocol defining the bucket operations the claim handler relies on."""

    def bucket_exists(self, name: str) -> bool:
        """Check if a bucket exists."""
        ...

    def create_bucket(self, name: str, region: str | None = None) -> None:
        """Create a bucket in the given region."""
        ...

    def list_object_keys(self, name: str) -> list[str]:
        """List the keys of every object in a bucket."""
        ...

    def delete_object(self, name: str, key: str) -> None:
        """Delete a single object."""
        ...

    def delete_bucket(self, name: str) -> None:
        """Delete an empty bucket."""
        ...

    def ensure_bucket(self, name: str, region: str | None = None) -> bool:
        """Make sure a bucket exists.

        Returns:
            True if the bucket was created by this call
        """
        ...

    def empty_and_delete_bucket(self, name: str) -> int:
        """Delete every object, then the bucket itself.

        Returns:
            Number of objects removed
        """
        ...
