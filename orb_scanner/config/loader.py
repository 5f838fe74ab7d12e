"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    BreakoutParams,
    DefaultConfig,
    LottoParams,
    RangeParams,
    ScanParams,
    ScoringParams,
    SessionParams,
    TradeParams,
    get_default_config,
)

_SECTION_TYPES = {
    "session": SessionParams,
    "range": RangeParams,
    "breakout": BreakoutParams,
    "scoring": ScoringParams,
    "trade": TradeParams,
    "scan": ScanParams,
    "lotto": LottoParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def _load_yaml(self) -> dict[str, Any]:
        instruments_file = self.config_dir / "instruments.yaml"

        if not instruments_file.exists():
            return {}

        with open(instruments_file) as f:
            return yaml.safe_load(f) or {}

    def load_instrument_config(self, symbol: str) -> dict[str, Any]:
        """Load symbol-specific configuration overrides."""
        return self._load_yaml().get("instruments", {}).get(symbol, {})  # type: ignore[no-any-return]

    def load_scanner_config(self) -> dict[str, Any]:
        """Load scanner-wide overrides from the ``scanner`` section."""
        return self._load_yaml().get("scanner", {})  # type: ignore[no-any-return]

    def merge_config(
        self,
        symbol: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Runtime overrides (highest priority)
        2. Symbol-specific overrides from instruments.yaml
        3. Scanner-wide YAML settings over global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_scanner_config())

        if symbol:
            config = self._deep_merge(config, self.load_instrument_config(symbol))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def build_config(
        self,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Build a typed scanner-wide configuration."""
        merged = self.merge_config(None, overrides)
        return DefaultConfig(**{
            name: self._build_section(section_type, merged.get(name, {}))
            for name, section_type in _SECTION_TYPES.items()
        })

    def trade_params(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> TradeParams:
        """Build the trade parameters for one symbol."""
        merged = self.merge_config(symbol, overrides)
        return self._build_section(TradeParams, merged.get("trade", {}))

    def _build_section(self, section_type: type, values: dict[str, Any]) -> Any:
        known = {f.name for f in fields(section_type)}
        kwargs = {}
        for key, value in values.items():
            if key not in known:
                continue
            # YAML lists become tuples to keep the frozen sections hashable
            kwargs[key] = tuple(value) if isinstance(value, list) else value
        return section_type(**kwargs)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
