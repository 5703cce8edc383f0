"""
Pytest configuration and shared fixtures
These fixtures are available to all test files
"""

import logging
import struct
from typing import Any, Dict

import pytest
import structlog
import yaml
from solders.pubkey import Pubkey

from pumpcurve.config import RPCConfig, RPCEndpoint
from pumpcurve.curve_state import CurveState
from pumpcurve.logger import LIBRARY_LOGGER
from pumpcurve.metrics import get_metrics, init_metrics
from pumpcurve.params import ProtocolParameters


# A mint and a creator that are valid base58 pubkeys
EXAMPLE_MINT = Pubkey.from_string("So11111111111111111111111111111111111111112")
EXAMPLE_CREATOR = Pubkey.from_string("4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T")


@pytest.fixture(autouse=True)
def reset_metrics():
    """Clear process-wide metrics around every test"""
    get_metrics().reset()
    yield
    get_metrics().reset()


@pytest.fixture
def restore_logging():
    """Undo setup_logging and process-wide metrics replacement after a test"""
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    handlers = list(library_logger.handlers)
    level = library_logger.level
    yield library_logger
    for handler in list(library_logger.handlers):
        if handler not in handlers:
            library_logger.removeHandler(handler)
            handler.close()
    library_logger.setLevel(level)
    structlog.reset_defaults()
    init_metrics()


@pytest.fixture
def example_mint() -> Pubkey:
    return EXAMPLE_MINT


@pytest.fixture
def example_creator() -> Pubkey:
    return EXAMPLE_CREATOR


@pytest.fixture
def default_params() -> ProtocolParameters:
    """Pump.fun mainnet global values (1% platform + 1% creator fee)"""
    return ProtocolParameters()


@pytest.fixture
def fee_free_params() -> ProtocolParameters:
    """Default reserves with both fees disabled"""
    return ProtocolParameters(fee_basis_points=0, creator_fee_basis_points=0)


@pytest.fixture
def standard_curve_state() -> CurveState:
    """Curve part-way through trading, created before creator fees existed"""
    return CurveState(
        virtual_token_reserves=800_000_000_000_000,  # 800M tokens
        virtual_sol_reserves=40_000_000_000,  # 40 SOL
        real_token_reserves=520_000_000_000_000,  # 520M tokens
        real_sol_reserves=10_000_000_000,  # 10 SOL
        token_total_supply=1_000_000_000_000_000,
        complete=False
    )


@pytest.fixture
def creator_curve_state(standard_curve_state) -> CurveState:
    """Same reserves as standard_curve_state, with a recorded creator"""
    return CurveState(
        virtual_token_reserves=standard_curve_state.virtual_token_reserves,
        virtual_sol_reserves=standard_curve_state.virtual_sol_reserves,
        real_token_reserves=standard_curve_state.real_token_reserves,
        real_sol_reserves=standard_curve_state.real_sol_reserves,
        token_total_supply=standard_curve_state.token_total_supply,
        complete=False,
        creator=EXAMPLE_CREATOR
    )


@pytest.fixture
def migrated_curve_state() -> CurveState:
    """Curve whose reserves were drained at migration"""
    return CurveState(
        virtual_token_reserves=0,
        virtual_sol_reserves=0,
        real_token_reserves=0,
        real_sol_reserves=0,
        token_total_supply=1_000_000_000_000_000,
        complete=True,
        creator=EXAMPLE_CREATOR
    )


@pytest.fixture
def account_data_builder():
    """
    Build raw bonding curve account bytes by hand

    Returns a function taking the field values and returning bytes in the
    on-chain layout (discriminator + 5 x u64 + bool + 32-byte creator).
    """
    def build(
        virtual_token_reserves: int = 1_073_000_000_000_000,
        virtual_sol_reserves: int = 30_000_000_000,
        real_token_reserves: int = 793_100_000_000_000,
        real_sol_reserves: int = 0,
        token_total_supply: int = 1_000_000_000_000_000,
        complete: int = 0,
        creator: bytes = bytes(32),
        discriminator: bytes = bytes.fromhex("17b7f83760d8ac60"),
        trailing: bytes = b""
    ) -> bytes:
        return (
            discriminator
            + struct.pack("<Q", virtual_token_reserves)
            + struct.pack("<Q", virtual_sol_reserves)
            + struct.pack("<Q", real_token_reserves)
            + struct.pack("<Q", real_sol_reserves)
            + struct.pack("<Q", token_total_supply)
            + bytes([complete])
            + creator
            + trailing
        )

    return build


@pytest.fixture
def test_config_dict() -> Dict[str, Any]:
    """
    Sample configuration dictionary for testing

    Returns valid config that can be modified per test
    """
    return {
        "rpc": {
            "endpoints": [
                {
                    "url": "https://api.testnet.solana.com",
                    "priority": 1,
                    "label": "solana_labs_testnet",
                    "timeout_ms": 5000
                },
                {
                    "url": "https://api.devnet.solana.com",
                    "priority": 0,
                    "label": "solana_labs_devnet",
                    "timeout_ms": 2000
                }
            ],
            "max_retries_per_endpoint": 2
        },
        "protocol": {
            "fee_basis_points": 95,
            "creator_fee_basis_points": 5
        },
        "logging": {
            "level": "DEBUG",
            "format": "console",
            "output_file": None
        },
        "metrics": {
            "enable_histogram": False
        }
    }


@pytest.fixture
def test_config_file(test_config_dict, tmp_path):
    """
    Create a temporary config file for testing

    Returns path to temporary YAML config file
    """
    config_file = tmp_path / "test_config.yml"
    with open(config_file, 'w') as f:
        yaml.dump(test_config_dict, f)

    return str(config_file)


@pytest.fixture
def test_rpc_config() -> RPCConfig:
    """RPCConfig with two test endpoints (primary first)"""
    return RPCConfig(
        endpoints=[
            RPCEndpoint(url="https://primary.invalid", priority=0, label="primary", timeout_ms=1000),
            RPCEndpoint(url="https://backup.invalid", priority=1, label="backup", timeout_ms=1000),
        ],
        max_retries_per_endpoint=1
    )
