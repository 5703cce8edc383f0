"""
Process setup from a config file

Applies the `logging:` and `metrics:` sections of an AppConfig to the
process-wide logger and metrics collector, then hands back the objects a
caller needs to start quoting.

Usage:
    app_config = load_and_configure("config/config.yml")
    async with RPCClient(app_config.rpc_config) as rpc:
        service = build_quote_service(app_config, rpc)
        quote = await service.quote_buy(mint, 100_000_000)
"""

from solders.pubkey import Pubkey

from pumpcurve.config import AppConfig, ConfigurationManager
from pumpcurve.logger import get_logger, setup_logging
from pumpcurve.metrics import MetricsCollector, init_metrics
from pumpcurve.pumpfun_client import BondingCurveClient
from pumpcurve.quote_service import QuoteService
from pumpcurve.rpc_client import RPCClient


logger = get_logger(__name__)


def configure(app_config: AppConfig) -> MetricsCollector:
    """
    Configure logging and replace the metrics collector

    Returns:
        The new process-wide MetricsCollector
    """
    setup_logging(app_config.log_config)
    metrics = init_metrics(enable_histogram=app_config.metrics_config.enable_histogram)

    logger.info(
        "pumpcurve_configured",
        log_level=app_config.log_config.level,
        log_format=app_config.log_config.format,
        enable_histogram=app_config.metrics_config.enable_histogram,
        rpc_endpoints=[ep.label for ep in app_config.rpc_config.endpoints],
        program_id=app_config.program_id
    )
    return metrics


def load_and_configure(config_path: str) -> AppConfig:
    """Load a YAML config file and apply its logging and metrics sections"""
    app_config = ConfigurationManager(config_path).load_config()
    configure(app_config)
    return app_config


def build_quote_service(app_config: AppConfig, rpc_client: RPCClient) -> QuoteService:
    """QuoteService using the configured program id and protocol parameters"""
    curve_client = BondingCurveClient(rpc_client, Pubkey.from_string(app_config.program_id))
    return QuoteService(curve_client, app_config.protocol)
