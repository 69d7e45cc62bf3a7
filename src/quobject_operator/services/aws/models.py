"""Models for S3 backend access."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse

from ...constants import (
    CRED_ACCESS_KEY,
    CRED_ENDPOINT,
    CRED_INSECURE_SKIP_VERIFY,
    CRED_REGION,
    CRED_SECRET_KEY,
    CRED_USE_SSL,
)
from ...utils.errors import CredentialsError

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def parse_bool(value: str | None, default: bool, field_name: str) -> bool:
    """Parse a boolean flag stored as a secret string.

    Raises:
        CredentialsError: If the value is not a recognised boolean
    """
    if value is None or value.strip() == "":
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise CredentialsError(f"Field '{field_name}' must be a boolean, got {value!r}")


@dataclass
class StorageCredentials:
    """Connection settings for the S3 backend, read from the credential secret."""

    endpoint: str
    region: str
    access_key: str = field(repr=False)
    secret_key: str = field(repr=False)
    use_ssl: bool = True
    insecure_skip_verify: bool = False

    @classmethod
    def from_secret_data(cls, data: dict[str, str]) -> "StorageCredentials":
        """Build credentials from decoded secret data.

        Raises:
            CredentialsError: If a required field is missing or a flag is malformed
        """
        required = (CRED_ENDPOINT, CRED_REGION, CRED_ACCESS_KEY, CRED_SECRET_KEY)
        missing = [key for key in required if not (data.get(key) or "").strip()]
        if missing:
            raise CredentialsError(f"Credential secret is missing required fields: {', '.join(missing)}")

        return cls(
            endpoint=data[CRED_ENDPOINT].strip(),
            region=data[CRED_REGION].strip(),
            access_key=data[CRED_ACCESS_KEY].strip(),
            secret_key=data[CRED_SECRET_KEY].strip(),
            use_ssl=parse_bool(data.get(CRED_USE_SSL), True, CRED_USE_SSL),
            insecure_skip_verify=parse_bool(data.get(CRED_INSECURE_SKIP_VERIFY), False, CRED_INSECURE_SKIP_VERIFY),
        )

    @property
    def endpoint_url(self) -> str:
        """Endpoint with a scheme, chosen from ``use_ssl`` when absent."""
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"

    @property
    def port(self) -> int:
        """Port the endpoint listens on."""
        parsed = urlparse(self.endpoint_url)
        if parsed.port:
            return parsed.port
        return 443 if parsed.scheme == "https" else 80
