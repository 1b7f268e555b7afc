"""
Configuration schema for the pricing engine.

Loaded from YAML (from_yaml) or from environment / .env (from_env) and
validated at construction. build_orchestrator() wires a
BatchFeeOrchestrator from a config and a catalog.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from delivery_pricing.catalog import CatalogClient, HttpCatalogClient, InMemoryCatalog
from delivery_pricing.logging import create_logger
from delivery_pricing.orchestrator import BatchFeeOrchestrator

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    """
    Pricing engine configuration.

    Immutable after construction (frozen dataclass).
    """

    # Most distinct shops one cart may hold; each gets its own fetch thread
    max_workers: int = 64
    fetch_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    # Catalog source: a YAML file, or an HTTP base URL
    catalog_path: Optional[Path] = None
    catalog_url: Optional[str] = None

    def __post_init__(self):
        """Validate engine configuration."""
        if not 1 <= self.max_workers <= 256:
            raise ValueError(
                f"max_workers must be in [1, 256], got {self.max_workers}"
            )

        if self.fetch_timeout_seconds <= 0:
            raise ValueError(
                f"fetch_timeout_seconds must be > 0, got {self.fetch_timeout_seconds}"
            )

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {sorted(_LOG_LEVELS)}"
            )

        if self.catalog_path is not None and self.catalog_url is not None:
            raise ValueError("Set either catalog_path or catalog_url, not both")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            max_workers: 64
            fetch_timeout_seconds: 2.5
            log_level: "INFO"
            catalog_path: "./config/shops.yaml"

        Raises:
            ConfigError: If the file is missing, unparsable or invalid
        """
        path = Path(yaml_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {yaml_path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_path}: {e}")

        catalog_path = data.get("catalog_path")
        try:
            return cls(
                max_workers=int(data.get("max_workers", 64)),
                fetch_timeout_seconds=float(data.get("fetch_timeout_seconds", 5.0)),
                log_level=str(data.get("log_level", "INFO")),
                catalog_path=Path(catalog_path) if catalog_path else None,
                catalog_url=data.get("catalog_url"),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration in {yaml_path}: {e}") from e

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Load configuration from environment variables (and a .env file).

        Variables: DELIVERY_MAX_WORKERS, DELIVERY_FETCH_TIMEOUT,
        DELIVERY_LOG_LEVEL, DELIVERY_CATALOG_URL, DELIVERY_CATALOG_PATH.

        Raises:
            ConfigError: If a value is invalid
        """
        load_dotenv()

        catalog_path = os.getenv("DELIVERY_CATALOG_PATH")
        try:
            return cls(
                max_workers=int(os.getenv("DELIVERY_MAX_WORKERS", 64)),
                fetch_timeout_seconds=float(os.getenv("DELIVERY_FETCH_TIMEOUT", 5.0)),
                log_level=os.getenv("DELIVERY_LOG_LEVEL", "INFO"),
                catalog_path=Path(catalog_path) if catalog_path else None,
                catalog_url=os.getenv("DELIVERY_CATALOG_URL") or None,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e


def build_catalog(config: EngineConfig) -> CatalogClient:
    """
    Instantiate the catalog named by config.

    Raises:
        ConfigError: If no catalog source is configured
    """
    if config.catalog_path is not None:
        return InMemoryCatalog.from_yaml(config.catalog_path)
    if config.catalog_url is not None:
        return HttpCatalogClient(base_url=config.catalog_url, timeout=config.fetch_timeout_seconds)
    raise ConfigError("No catalog source configured (catalog_path or catalog_url)")


def build_orchestrator(
    config: EngineConfig,
    catalog: Optional[CatalogClient] = None,
) -> BatchFeeOrchestrator:
    """Wire a BatchFeeOrchestrator; the catalog defaults to build_catalog(config)."""
    return BatchFeeOrchestrator(
        catalog=catalog if catalog is not None else build_catalog(config),
        max_workers=config.max_workers,
        fetch_timeout=config.fetch_timeout_seconds,
        logger=create_logger("orchestrator", level=config.logging_level),
    )
