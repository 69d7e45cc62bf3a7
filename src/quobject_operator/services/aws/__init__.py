"""S3 storage backend implementation on top of boto3."""
