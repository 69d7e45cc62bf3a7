"""S3 storage client implementation on top of boto3."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ... import metrics
from ...utils.context import check_deadline
from .models import StorageCredentials

logger = logging.getLogger(__name__)

# Error codes meaning the bucket (or object) is not there
NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}

# Error codes from CreateBucket that still leave a usable bucket behind
ALREADY_EXISTS_CODES = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}

# Region that rejects an explicit LocationConstraint
DEFAULT_REGION = "us-east-1"


def error_code(error: ClientError) -> str:
    """Return the S3 error code carried by a ClientError."""
    return str(error.response.get("Error", {}).get("Code", ""))


def is_not_found(error: ClientError) -> bool:
    """Check whether a ClientError reports a missing bucket or object."""
    if error_code(error) in NOT_FOUND_CODES:
        return True
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 404


class S3StorageClient:
    """S3-compatible storage client used by the claim handler."""

    def __init__(
        self,
        endpoint: str,
        region: str,
        access_key: str,
        secret_key: str,
        use_ssl: bool = True,
        insecure_skip_verify: bool = False,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
    ) -> None:
        """Initialize S3 storage client.

        Args:
            endpoint: S3 endpoint URL; a scheme is added from use_ssl when missing
            region: Region used for signing and as bucket location
            access_key: Access key ID
            secret_key: Secret access key
            use_ssl: Talk to the endpoint over TLS
            insecure_skip_verify: Skip TLS certificate verification
            connect_timeout: Seconds to wait for a connection
            read_timeout: Seconds to wait for a response
        """
        if "://" not in endpoint:
            endpoint = f"{'https' if use_ssl else 'http'}://{endpoint}"
        self.endpoint = endpoint
        self.region = region

        # Retries come from re-delivery of the claim event, not from botocore
        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"total_max_attempts": 1},
        )

        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=config,
            use_ssl=use_ssl,
            verify=not insecure_skip_verify,
        )

    @classmethod
    def from_credentials(
        cls,
        credentials: StorageCredentials,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
    ) -> "S3StorageClient":
        """Create a client from credential secret contents."""
        return cls(
            endpoint=credentials.endpoint_url,
            region=credentials.region,
            access_key=credentials.access_key,
            secret_key=credentials.secret_key,
            use_ssl=credentials.use_ssl,
            insecure_skip_verify=credentials.insecure_skip_verify,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        """Run one S3 request with deadline checking and metrics."""
        check_deadline(operation)
        start_time = time.time()
        try:
            response = fn(**kwargs)
            metrics.api_call_total.labels(api_type="s3", operation=operation, result="success").inc()
            return response
        except Exception:
            metrics.api_call_total.labels(api_type="s3", operation=operation, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="s3", operation=operation).observe(duration)

    def bucket_exists(self, name: str) -> bool:
        """Check if bucket exists.

        Any client error counts as absence; a bucket owned by someone else
        then surfaces through the create call.
        """
        try:
            self._call("head_bucket", self.client.head_bucket, Bucket=name)
            return True
        except ClientError as e:
            if not is_not_found(e):
                logger.debug(f"HeadBucket for {name} failed with {error_code(e)}, treating as absent")
            return False

    def create_bucket(self, name: str, region: str | None = None) -> None:
        """Create a bucket."""
        create_params: dict[str, Any] = {"Bucket": name}
        if region and region != DEFAULT_REGION:
            create_params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            self._call("create_bucket", self.client.create_bucket, **create_params)
        except ClientError as e:
            logger.error(f"Failed to create bucket {name}: {e}")
            raise

    def list_object_keys(self, name: str) -> list[str]:
        """List all object keys in a bucket, following pagination."""
        check_deadline("list_objects_v2")
        keys: list[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        start_time = time.time()
        try:
            for page in paginator.paginate(Bucket=name):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
                check_deadline("list_objects_v2")
            metrics.api_call_total.labels(api_type="s3", operation="list_objects_v2", result="success").inc()
        except Exception:
            metrics.api_call_total.labels(api_type="s3", operation="list_objects_v2", result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="s3", operation="list_objects_v2").observe(duration)
        return keys

    def delete_object(self, name: str, key: str) -> None:
        """Delete a single object."""
        self._call("delete_object", self.client.delete_object, Bucket=name, Key=key)

    def delete_bucket(self, name: str) -> None:
        """Delete an empty bucket."""
        self._call("delete_bucket", self.client.delete_bucket, Bucket=name)

    def ensure_bucket(self, name: str, region: str | None = None) -> bool:
        """Make sure a bucket exists, creating it when the existence check says it is absent.

        Returns:
            True if the bucket was created by this call

        Raises:
            ClientError: If creation fails for any reason other than the bucket
                already existing
        """
        if self.bucket_exists(name):
            return False

        try:
            self.create_bucket(name, region or self.region)
        except ClientError as e:
            if error_code(e) in ALREADY_EXISTS_CODES:
                logger.info(f"Bucket {name} already exists ({error_code(e)}), treating as ready")
                return False
            raise
        logger.info(f"Created bucket {name}")
        return True

    def empty_and_delete_bucket(self, name: str) -> int:
        """Delete all objects one by one, then the bucket.

        A missing bucket counts as already deleted. A failing object delete
        stops the sequence before the bucket delete is attempted.

        Returns:
            Number of objects removed
        """
        try:
            keys = self.list_object_keys(name)
        except ClientError as e:
            if is_not_found(e):
                logger.info(f"Bucket {name} does not exist, nothing to delete")
                return 0
            raise

        removed = 0
        for key in keys:
            try:
                self.delete_object(name, key)
            except ClientError as e:
                if error_code(e) == "NoSuchBucket":
                    logger.info(f"Bucket {name} disappeared while emptying it")
                    return removed
                logger.error(f"Failed to delete object {key} from bucket {name}: {e}")
                raise
            removed += 1
            logger.debug(f"Deleted object: {key}")

        try:
            self.delete_bucket(name)
        except ClientError as e:
            if not is_not_found(e):
                logger.error(f"Failed to delete bucket {name}: {e}")
                raise
            logger.info(f"Bucket {name} was already deleted")
        else:
            logger.info(f"Deleted bucket {name} after removing {removed} objects")
        return removed
