"""
Unit tests for client configuration loading
"""

import json

import pytest

from bos_sdk.config import (
    BOS_HOST,
    ClientConfig,
    load_config_from_dict,
    load_config_from_env,
    load_config_from_file,
    load_config_from_json,
)
from bos_sdk.exceptions import ConfigError, ValidationError


BASE = {"access_key": "AK", "secret_key": "SK", "bucket": "mybucket", "region": "gz"}


class TestClientConfig:
    """Test client configuration"""

    def test_defaults(self):
        config = ClientConfig(**BASE)
        assert config.endpoint_domain == BOS_HOST == "bcebos.com"
        assert config.scheme == "https"
        assert config.connect_timeout == 10.0
        assert config.timeout is None
        assert config.verify_ssl is True
        assert config.default_expiry_seconds == 1800

    def test_host(self):
        assert ClientConfig(**BASE).host == "mybucket.gz.bcebos.com"
        assert ClientConfig(**BASE, endpoint_domain="example.com").host == "mybucket.gz.example.com"

    def test_timeouts(self):
        assert ClientConfig(**BASE, timeout=30.0).timeouts == (10.0, 30.0)

    def test_missing_keys_listed(self):
        with pytest.raises(ValidationError, match="missing: bucket,region") as exc_info:
            ClientConfig(access_key="AK", secret_key="SK", bucket="", region="")
        assert exc_info.value.details["missing"] == ["bucket", "region"]

    def test_validation(self):
        with pytest.raises(ValidationError, match="Unsupported scheme"):
            ClientConfig(**BASE, scheme="ftp")
        with pytest.raises(ValidationError, match="Connect timeout must be positive"):
            ClientConfig(**BASE, connect_timeout=0)
        with pytest.raises(ValidationError, match="Timeout must be positive"):
            ClientConfig(**BASE, timeout=-1)
        with pytest.raises(ValidationError, match="Default expiry must be positive"):
            ClientConfig(**BASE, default_expiry_seconds=0)


class TestConfigLoaders:
    """Test loading configuration from different sources"""

    def test_from_dict_ignores_unknown(self):
        config = load_config_from_dict(dict(BASE, unknown="x"))
        assert config.bucket == "mybucket"

    def test_from_dict_missing(self):
        with pytest.raises(ValidationError, match="missing: access_key,secret_key,bucket,region"):
            load_config_from_dict({})

    def test_from_json(self):
        config = load_config_from_json(json.dumps(dict(BASE, default_expiry_seconds=600)))
        assert config.default_expiry_seconds == 600

    def test_from_json_invalid(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config_from_json("{not json")
        assert exc_info.value.error_code == "PARSE_ERROR"

    def test_from_json_not_object(self):
        with pytest.raises(ConfigError):
            load_config_from_json("[]")

    def test_from_file(self, tmp_path):
        path = tmp_path / "bos.json"
        path.write_text(json.dumps(BASE), encoding="utf-8")
        assert load_config_from_file(path).region == "gz"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config_from_file(tmp_path / "missing.json")
        assert exc_info.value.error_code == "FILE_ERROR"

    def test_from_env(self):
        environ = {
            "BOS_ACCESS_KEY": "AK",
            "BOS_SECRET_KEY": "SK",
            "BOS_BUCKET": "mybucket",
            "BOS_REGION": "bj",
            "BOS_CONNECT_TIMEOUT": "3.5",
            "BOS_EXPIRY_SECONDS": "900",
            "BOS_VERIFY_SSL": "false",
        }
        config = load_config_from_env(environ)
        assert config.host == "mybucket.bj.bcebos.com"
        assert config.connect_timeout == 3.5
        assert config.default_expiry_seconds == 900
        assert config.verify_ssl is False

    def test_from_env_aliases(self):
        environ = {"BOS_KEY": "AK", "BOS_SECRET": "SK", "BOS_BUCKET": "b", "BOS_REGION": "gz"}
        config = load_config_from_env(environ)
        assert config.access_key == "AK"
        assert config.secret_key == "SK"

    def test_from_env_overrides(self):
        environ = {"BOS_KEY": "AK", "BOS_SECRET": "SK", "BOS_BUCKET": "b", "BOS_REGION": "gz"}
        config = load_config_from_env(environ, bucket="other", region=None)
        assert config.bucket == "other"
        assert config.region == "gz"

    def test_from_env_bad_value(self):
        environ = dict(BOS_KEY="AK", BOS_SECRET="SK", BOS_BUCKET="b", BOS_REGION="gz",
                       BOS_TIMEOUT="soon")
        with pytest.raises(ConfigError):
            load_config_from_env(environ)
