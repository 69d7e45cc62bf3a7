"""Builder for backend bucket names."""

from __future__ import annotations

import secrets
from typing import Any, Callable

from ..constants import BUCKET_SUFFIX_ALPHABET, BUCKET_SUFFIX_LENGTH

SuffixSource = Callable[[], str]


def generate_suffix(length: int = BUCKET_SUFFIX_LENGTH) -> str:
    """Generate a random lowercase alphanumeric suffix."""
    return "".join(secrets.choice(BUCKET_SUFFIX_ALPHABET) for _ in range(length))


def resolve_bucket_name(
    claim: dict[str, Any],
    suffix_source: SuffixSource = generate_suffix,
) -> str:
    """Work out which backend bucket a claim refers to.

    Precedence, first match wins:

    1. ``spec.bucketName``
    2. ``status.bucketName`` from an earlier pass, so a generated suffix is
       never rolled again
    3. ``{spec.generateBucketName}-{suffix}``
    4. ``{namespace}-{name}-{suffix}``

    Args:
        claim: Claim body (metadata, spec, status)
        suffix_source: Callable returning a fresh random suffix

    Returns:
        Bucket name
    """
    spec = claim.get("spec") or {}
    status = claim.get("status") or {}
    meta = claim.get("metadata") or {}

    if spec.get("bucketName"):
        return spec["bucketName"]

    if status.get("bucketName"):
        return status["bucketName"]

    prefix = spec.get("generateBucketName")
    if prefix:
        return f"{prefix}-{suffix_source()}"

    namespace = meta.get("namespace", "default")
    name = meta.get("name", "unknown")
    return f"{namespace}-{name}-{suffix_source()}"
