"""Tests for storage credentials and the storage builders."""

from __future__ import annotations

import base64
from unittest.mock import Mock, patch

import pytest
from kubernetes import client

from quobject_operator.builders.storage import create_storage_client, load_storage_credentials
from quobject_operator.config import OperatorConfig
from quobject_operator.services.aws.models import StorageCredentials, parse_bool
from quobject_operator.utils.errors import CredentialsError

SECRET_DATA = {
    "endpoint": "s3.example.com",
    "region": "eu-central-1",
    "accessKey": "AKIAEXAMPLE",
    "secretKey": "secret-example",
}


class TestParseBool:
    """Test cases for parse_bool function."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "on", " True "])
    def test_true_values(self, value):
        """Test accepted spellings of true."""
        assert parse_bool(value, False, "useSSL") is True

    @pytest.mark.parametrize("value", ["false", "False", "0", "no", "off"])
    def test_false_values(self, value):
        """Test accepted spellings of false."""
        assert parse_bool(value, True, "useSSL") is False

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_default_when_unset(self, value):
        """Test missing values fall back to the default."""
        assert parse_bool(value, True, "useSSL") is True

    def test_invalid_value(self):
        """Test unrecognised values are rejected."""
        with pytest.raises(CredentialsError, match="useSSL"):
            parse_bool("maybe", True, "useSSL")


class TestStorageCredentials:
    """Test cases for StorageCredentials."""

    def test_from_secret_data_defaults(self):
        """Test parsing with optional fields left out."""
        credentials = StorageCredentials.from_secret_data(SECRET_DATA)

        assert credentials.endpoint == "s3.example.com"
        assert credentials.region == "eu-central-1"
        assert credentials.access_key == "AKIAEXAMPLE"
        assert credentials.secret_key == "secret-example"
        assert credentials.use_ssl is True
        assert credentials.insecure_skip_verify is False

    def test_from_secret_data_flags(self):
        """Test the optional flags are parsed."""
        credentials = StorageCredentials.from_secret_data(
            {**SECRET_DATA, "useSSL": "false", "insecureSkipVerify": "true"}
        )
        assert credentials.use_ssl is False
        assert credentials.insecure_skip_verify is True

    def test_missing_fields_listed(self):
        """Test every missing required field is named."""
        with pytest.raises(CredentialsError) as exc_info:
            StorageCredentials.from_secret_data({"endpoint": "s3.example.com"})

        message = str(exc_info.value)
        for field_name in ("region", "accessKey", "secretKey"):
            assert field_name in message

    def test_repr_hides_keys(self):
        """Test access and secret keys are left out of repr."""
        text = repr(StorageCredentials.from_secret_data(SECRET_DATA))
        assert "AKIAEXAMPLE" not in text
        assert "secret-example" not in text

    @pytest.mark.parametrize(
        "endpoint,use_ssl,url,port",
        [
            ("s3.example.com", True, "https://s3.example.com", 443),
            ("minio:9000", False, "http://minio:9000", 9000),
            ("http://minio", True, "http://minio", 80),
            ("https://s3.example.com:8443", True, "https://s3.example.com:8443", 8443),
        ],
    )
    def test_endpoint_url_and_port(self, endpoint, use_ssl, url, port):
        """Test scheme and port derivation from the endpoint."""
        credentials = StorageCredentials(endpoint, "r", "a", "s", use_ssl=use_ssl)
        assert credentials.endpoint_url == url
        assert credentials.port == port


class TestLoadStorageCredentials:
    """Test cases for load_storage_credentials function."""

    def test_success(self):
        """Test reading credentials from the secret."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.return_value = client.V1Secret(
            data={k: base64.b64encode(v.encode()).decode() for k, v in SECRET_DATA.items()}
        )

        credentials = load_storage_credentials(mock_api, "quobject-controller", "s3-credentials")

        assert credentials.endpoint == "s3.example.com"
        mock_api.read_namespaced_secret.assert_called_once_with(
            name="s3-credentials", namespace="quobject-controller"
        )

    def test_not_found(self):
        """Test a missing secret raises CredentialsError."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(CredentialsError, match="not found"):
            load_storage_credentials(mock_api, "quobject-controller", "s3-credentials")

    def test_api_error_wrapped(self):
        """Test other API errors become CredentialsError."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=403, reason="Forbidden")

        with pytest.raises(CredentialsError, match="Failed to read credential secret"):
            load_storage_credentials(mock_api, "quobject-controller", "s3-credentials")


class TestCreateStorageClient:
    """Test cases for create_storage_client function."""

    @patch("quobject_operator.builders.storage.S3StorageClient")
    def test_uses_configured_timeouts(self, mock_client_cls):
        """Test the client gets the timeouts from the operator config."""
        credentials = StorageCredentials.from_secret_data(SECRET_DATA)
        config = OperatorConfig(s3_connect_timeout_seconds=2.0, s3_read_timeout_seconds=5.0)

        create_storage_client(credentials, config)

        mock_client_cls.from_credentials.assert_called_once_with(
            credentials,
            connect_timeout=2.0,
            read_timeout=5.0,
        )
