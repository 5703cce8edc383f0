"""
Unit tests for Configuration Manager (pumpcurve/config.py)

Tests:
- YAML parsing
- Environment variable substitution
- Protocol parameter overrides
- Error handling
"""

import os

import pytest
import yaml

from pumpcurve.config import (
    PUMP_FUN_PROGRAM_ID_STR,
    AppConfig,
    ConfigurationManager,
    LogConfig,
    MetricsConfig,
)
from pumpcurve.params import ProtocolParameters


class TestConfigurationManager:
    """Test configuration loading and validation"""

    def test_load_valid_config(self, test_config_file):
        """Test loading a valid configuration file"""
        config_manager = ConfigurationManager(test_config_file)
        app_config = config_manager.load_config()

        assert isinstance(app_config, AppConfig)

        assert len(app_config.rpc_config.endpoints) == 2
        assert app_config.rpc_config.max_retries_per_endpoint == 2

        assert app_config.log_config.level == "DEBUG"
        assert app_config.log_config.format == "console"

        assert app_config.metrics_config.enable_histogram is False

    def test_rpc_endpoint_priority_sorting(self, test_config_file):
        """Test that RPC endpoints are sorted by priority"""
        app_config = ConfigurationManager(test_config_file).load_config()

        endpoints = app_config.rpc_config.endpoints
        assert [ep.priority for ep in endpoints] == [0, 1]
        assert endpoints[0].label == "solana_labs_devnet"
        assert endpoints[0].timeout_ms == 2000

    def test_protocol_overrides_keep_other_defaults(self, test_config_file):
        """Test protocol section overrides only the keys it names"""
        app_config = ConfigurationManager(test_config_file).load_config()

        assert app_config.protocol.fee_basis_points == 95
        assert app_config.protocol.creator_fee_basis_points == 5
        assert app_config.protocol.initial_virtual_sol_reserves == 30_000_000_000
        assert app_config.protocol.initial_virtual_token_reserves == 1_073_000_000_000_000
        assert app_config.program_id == PUMP_FUN_PROGRAM_ID_STR

    def test_custom_program_id(self, test_config_dict, tmp_path):
        test_config_dict["protocol"]["program_id"] = "11111111111111111111111111111111"
        config_file = tmp_path / "program.yml"
        config_file.write_text(yaml.dump(test_config_dict))

        app_config = ConfigurationManager(str(config_file)).load_config()

        assert app_config.program_id == "11111111111111111111111111111111"
        assert app_config.protocol == ProtocolParameters(fee_basis_points=95, creator_fee_basis_points=5)

    def test_unknown_protocol_key(self, test_config_dict, tmp_path):
        """Test typos in the protocol section are rejected"""
        test_config_dict["protocol"]["fee_bps"] = 100
        config_file = tmp_path / "typo.yml"
        config_file.write_text(yaml.dump(test_config_dict))

        with pytest.raises(ValueError, match="Unknown protocol parameters: fee_bps"):
            ConfigurationManager(str(config_file)).load_config()

    def test_negative_protocol_value(self, test_config_dict, tmp_path):
        test_config_dict["protocol"]["fee_basis_points"] = -1
        config_file = tmp_path / "negative.yml"
        config_file.write_text(yaml.dump(test_config_dict))

        with pytest.raises(ValueError, match="fee_basis_points"):
            ConfigurationManager(str(config_file)).load_config()

    def test_missing_config_file(self):
        """Test error when config file doesn't exist"""
        config_manager = ConfigurationManager("nonexistent.yml")

        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            config_manager.load_config()

    def test_no_endpoints(self, tmp_path):
        """Test error when no RPC endpoints configured"""
        config_file = tmp_path / "no_endpoints.yml"
        config_file.write_text(yaml.dump({"rpc": {"endpoints": []}}))

        with pytest.raises(ValueError, match="No RPC endpoints configured"):
            ConfigurationManager(str(config_file)).load_config()

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")

        with pytest.raises(ValueError, match="No RPC endpoints configured"):
            ConfigurationManager(str(config_file)).load_config()

    def test_endpoint_missing_url(self, tmp_path):
        config_file = tmp_path / "no_url.yml"
        config_file.write_text(yaml.dump({"rpc": {"endpoints": [{"label": "x", "priority": 0}]}}))

        with pytest.raises(ValueError, match="missing required key"):
            ConfigurationManager(str(config_file)).load_config()

    def test_invalid_retry_count(self, test_config_dict, tmp_path):
        test_config_dict["rpc"]["max_retries_per_endpoint"] = 0
        config_file = tmp_path / "retries.yml"
        config_file.write_text(yaml.dump(test_config_dict))

        with pytest.raises(ValueError, match="max_retries_per_endpoint"):
            ConfigurationManager(str(config_file)).load_config()

    def test_invalid_log_format(self, test_config_dict, tmp_path):
        test_config_dict["logging"]["format"] = "xml"
        config_file = tmp_path / "log_format.yml"
        config_file.write_text(yaml.dump(test_config_dict))

        with pytest.raises(ValueError, match="Unknown logging format"):
            ConfigurationManager(str(config_file)).load_config()

    def test_env_var_substitution(self, tmp_path, monkeypatch):
        """Test environment variable substitution in URLs"""
        monkeypatch.setenv("TEST_API_KEY", "secret_key_123")

        config_file = tmp_path / "env_test.yml"
        config_file.write_text(yaml.dump({
            "rpc": {
                "endpoints": [{
                    "url": "https://rpc.test.com/?api-key=${TEST_API_KEY}",
                    "priority": 0,
                    "label": "test"
                }]
            }
        }))

        app_config = ConfigurationManager(str(config_file)).load_config()

        assert app_config.rpc_config.endpoints[0].url == "https://rpc.test.com/?api-key=secret_key_123"

    def test_missing_env_var(self, tmp_path):
        """Test error when environment variable is not found"""
        assert "NONEXISTENT_VAR" not in os.environ

        config_file = tmp_path / "missing_env.yml"
        config_file.write_text(yaml.dump({
            "rpc": {
                "endpoints": [{
                    "url": "https://rpc.test.com/?api-key=${NONEXISTENT_VAR}",
                    "priority": 0,
                    "label": "test"
                }]
            }
        }))

        with pytest.raises(ValueError, match="Environment variable NONEXISTENT_VAR not found"):
            ConfigurationManager(str(config_file)).load_config()

    def test_dot_notation_get(self, test_config_file):
        """Test getting config values with dot notation"""
        config_manager = ConfigurationManager(test_config_file)
        config_manager.load_config()

        assert config_manager.get("protocol.fee_basis_points") == 95
        assert config_manager.get("logging.level") == "DEBUG"
        assert config_manager.get("nonexistent.key", default="default_value") == "default_value"
        assert config_manager.get("logging.level.deeper", default=1) == 1

    def test_get_before_load(self, test_config_file):
        with pytest.raises(RuntimeError, match="Configuration not loaded"):
            ConfigurationManager(test_config_file).get("logging.level")

    def test_reload_config(self, test_config_file):
        """Test re-reading a modified configuration file"""
        config_manager = ConfigurationManager(test_config_file)
        config_manager.load_config()

        with open(test_config_file, 'r') as f:
            config_data = yaml.safe_load(f)
        config_data['protocol']['fee_basis_points'] = 125
        with open(test_config_file, 'w') as f:
            yaml.dump(config_data, f)

        reloaded = config_manager.reload_config()

        assert reloaded.protocol.fee_basis_points == 125

    def test_default_values(self, tmp_path):
        """Test that default values are applied correctly"""
        config_file = tmp_path / "minimal.yml"
        config_file.write_text(yaml.dump({
            "rpc": {"endpoints": [{"url": "https://rpc.test.com"}]}
        }))

        app_config = ConfigurationManager(str(config_file)).load_config()

        endpoint = app_config.rpc_config.endpoints[0]
        assert endpoint.priority == 0
        assert endpoint.label == "https://rpc.test.com"
        assert endpoint.timeout_ms == 5000
        assert app_config.rpc_config.max_retries_per_endpoint == 1

        assert app_config.protocol == ProtocolParameters()
        assert app_config.log_config == LogConfig()
        assert app_config.metrics_config == MetricsConfig()

    def test_example_config_parses(self, monkeypatch):
        """Test the shipped example configuration loads"""
        monkeypatch.setenv("HELIUS_API_KEY", "example")
        example = os.path.join(os.path.dirname(__file__), "..", "..", "config", "config.example.yml")

        app_config = ConfigurationManager(example).load_config()

        assert app_config.protocol == ProtocolParameters()
        assert app_config.rpc_config.endpoints[0].label == "helius"
