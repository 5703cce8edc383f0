"""
Configuration Manager for pumpcurve
Loads RPC, protocol, logging and metrics settings from YAML with environment variable support
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from pumpcurve.params import ProtocolParameters


PUMP_FUN_PROGRAM_ID_STR = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"

_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

LOG_FORMATS = ("json", "console")


@dataclass
class RPCEndpoint:
    """RPC endpoint configuration"""
    url: str
    priority: int
    label: str
    timeout_ms: int = 5000


@dataclass
class RPCConfig:
    """RPC client configuration"""
    endpoints: List[RPCEndpoint]
    max_retries_per_endpoint: int = 1


@dataclass
class LogConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "json"
    output_file: Optional[str] = None


@dataclass
class MetricsConfig:
    """Metrics configuration"""
    enable_histogram: bool = True


@dataclass
class AppConfig:
    """Complete pumpcurve configuration"""
    rpc_config: RPCConfig
    protocol: ProtocolParameters
    program_id: str = PUMP_FUN_PROGRAM_ID_STR
    log_config: Optional[LogConfig] = None
    metrics_config: Optional[MetricsConfig] = None

    def __post_init__(self):
        if self.log_config is None:
            self.log_config = LogConfig()
        if self.metrics_config is None:
            self.metrics_config = MetricsConfig()


class ConfigurationManager:
    """Manages configuration from YAML files and environment variables"""

    def __init__(self, config_path: str):
        """
        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        self._config_data: Optional[Dict[str, Any]] = None
        self._app_config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """
        Load and validate configuration from file

        Returns:
            AppConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        self._config_data = self._substitute_env_vars(raw_config)
        self._app_config = self._parse_config(self._config_data)

        return self._app_config

    def reload_config(self) -> AppConfig:
        """Re-read the configuration file"""
        return self.load_config()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Args:
            key: Dot-notation key (e.g., "protocol.fee_basis_points")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if self._config_data is None:
            raise RuntimeError("Configuration not loaded. Call load_config() first.")

        value = self._config_data
        for k in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default

        return value

    def _substitute_env_vars(self, config: Any) -> Any:
        """
        Recursively substitute ${VAR_NAME} references in string values

        Raises:
            ValueError: If a referenced environment variable is not set
        """
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            def replace_var(match):
                var_name = match.group(1)
                value = os.getenv(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable {var_name} not found"
                    )
                return value

            return _ENV_VAR_PATTERN.sub(replace_var, config)
        else:
            return config

    def _parse_config(self, config: Dict[str, Any]) -> AppConfig:
        """
        Parse raw configuration into typed objects

        Raises:
            ValueError: If configuration is invalid
        """
        rpc_data = config.get('rpc') or {}
        endpoints_data = rpc_data.get('endpoints') or []

        if not endpoints_data:
            raise ValueError("No RPC endpoints configured")

        endpoints = []
        for ep in endpoints_data:
            try:
                endpoints.append(RPCEndpoint(
                    url=ep['url'],
                    priority=ep.get('priority', 0),
                    label=ep.get('label', ep['url']),
                    timeout_ms=ep.get('timeout_ms', 5000)
                ))
            except KeyError as e:
                raise ValueError(f"RPC endpoint missing required key: {e}") from e

        # 0 = highest priority
        endpoints.sort(key=lambda x: x.priority)

        rpc_config = RPCConfig(
            endpoints=endpoints,
            max_retries_per_endpoint=rpc_data.get('max_retries_per_endpoint', 1)
        )
        if rpc_config.max_retries_per_endpoint < 1:
            raise ValueError("rpc.max_retries_per_endpoint must be at least 1")

        protocol_data = dict(config.get('protocol') or {})
        program_id = protocol_data.pop('program_id', PUMP_FUN_PROGRAM_ID_STR)
        protocol = ProtocolParameters.from_dict(protocol_data)

        log_data = config.get('logging') or {}
        log_config = LogConfig(
            level=log_data.get('level', 'INFO'),
            format=log_data.get('format', 'json'),
            output_file=log_data.get('output_file')
        )
        if log_config.format not in LOG_FORMATS:
            raise ValueError(f"Unknown logging format: {log_config.format}")

        metrics_data = config.get('metrics') or {}
        metrics_config = MetricsConfig(
            enable_histogram=metrics_data.get('enable_histogram', True)
        )

        return AppConfig(
            rpc_config=rpc_config,
            protocol=protocol,
            program_id=program_id,
            log_config=log_config,
            metrics_config=metrics_config
        )
