"""
Strategy Manager for recovery strategies.

This module manages strategy registration and the order in which a recovery
cycle runs them. The order and the preserved state keys can be overridden from
a YAML file.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from strategies.base import RecoveryStrategy

logger = logging.getLogger(__name__)


class StrategyManager:
    """Manages recovery strategy registration and ordering."""

    def __init__(self):
        """Initialize the strategy manager."""
        self._strategies: Dict[str, RecoveryStrategy] = {}
        self._order: Optional[List[str]] = None
        self._config_cache: Dict[str, Dict[str, Any]] = {}

    def register_strategy(self, strategy: RecoveryStrategy) -> None:
        """
        Register a recovery strategy. Registration order is run order unless
        an explicit order is set.

        Args:
            strategy: RecoveryStrategy instance to register
        """
        name = strategy.name

        if name in self._strategies:
            logger.warning(f"Strategy '{name}' already registered, overwriting")

        self._strategies[name] = strategy
        logger.info(f"Registered recovery strategy '{name}'")

    def get_strategy(self, name: str) -> Optional[RecoveryStrategy]:
        """
        Get strategy by name.

        Returns:
            RecoveryStrategy instance if found, None otherwise
        """
        return self._strategies.get(name)

    def set_order(self, order: List[str]) -> None:
        """
        Fix the run order. Registered strategies missing from ``order`` are
        not run; unknown names are ignored with a warning.

        Args:
            order: Strategy names in run order
        """
        unknown = [name for name in order if name not in self._strategies]
        if unknown:
            logger.warning(f"Ignoring unknown recovery strategies in order: {unknown}")
        self._order = [name for name in order if name in self._strategies]

    def get_strategies(self) -> List[RecoveryStrategy]:
        """
        Get strategies in run order.

        Returns:
            Ordered list of RecoveryStrategy objects
        """
        if self._order is None:
            return list(self._strategies.values())
        return [self._strategies[name] for name in self._order]

    def list_strategies(self) -> List[str]:
        """
        List strategy names in run order.

        Returns:
            List of strategy names
        """
        return [strategy.name for strategy in self.get_strategies()]

    def load_strategy_config(self, config_path: Path) -> Dict[str, Any]:
        """
        Load strategy configuration from a YAML file.

        Expected keys (both optional):
            order: list of strategy names
            preserved_keys: list of state keys the reset strategy keeps

        Args:
            config_path: Path to the YAML file

        Returns:
            Dictionary containing strategy configuration

        Raises:
            FileNotFoundError: If the file is not found
            yaml.YAMLError: If the file is malformed
            ValueError: If the document is not a mapping, or order or
                preserved_keys is not a list
        """
        cache_key = str(config_path)
        if cache_key in self._config_cache:
            return self._config_cache[cache_key]

        if not config_path.exists():
            raise FileNotFoundError(f"Strategy config not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse strategy config {config_path}: {e}")
            raise

        if not isinstance(config, dict):
            raise ValueError(f"Strategy config must be a mapping: {config_path}")

        for key in ("order", "preserved_keys"):
            if key in config and not isinstance(config[key], list):
                raise ValueError(f"Strategy config '{key}' must be a list: {config_path}")

        self._config_cache[cache_key] = config
        logger.info(f"Loaded strategy config from {config_path}")
        return config

    def clear_config_cache(self) -> None:
        """Clear the configuration cache."""
        self._config_cache.clear()
