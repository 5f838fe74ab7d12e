"""Configuration validation utilities."""

import math
from dataclasses import dataclass
from typing import Any

from ..ranges.models import Timeframe
from ..session.clock import SessionPhase


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_range_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate opening range parameters."""
        errors = []

        if "timeframes" in params:
            value = params["timeframes"]
            allowed = {tf.value for tf in Timeframe}
            if not value or any(tf not in allowed for tf in value):
                errors.append(ValidationError(
                    field="timeframes",
                    message=f"Must be a non-empty subset of {sorted(allowed)}",
                    value=value
                ))

        if "min_range_pct" in params:
            value = params["min_range_pct"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="min_range_pct",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_breakout_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate breakout parameters."""
        errors = []

        if "buffer_pct" in params:
            value = params["buffer_pct"]
            if not _is_number(value) or value < 0 or value > 100:
                errors.append(ValidationError(
                    field="buffer_pct",
                    message="Must be a number between 0 and 100",
                    value=value
                ))

        if "confirm_close" in params:
            value = params["confirm_close"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="confirm_close",
                    message="Must be a boolean",
                    value=value
                ))

        if "zero_dte_cutoff_phase" in params:
            value = params["zero_dte_cutoff_phase"]
            if value not in {phase.value for phase in SessionPhase}:
                errors.append(ValidationError(
                    field="zero_dte_cutoff_phase",
                    message="Must be a session phase name",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scoring_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate confidence weights and thresholds."""
        errors = []
        weight_fields = ("volume_weight", "flow_weight", "pattern_weight", "ml_weight")

        for name in weight_fields:
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        weights = [params.get(name) for name in weight_fields]
        if all(_is_number(w) for w in weights) and sum(weights) <= 0:
            errors.append(ValidationError(
                field="weights",
                message="At least one weight must be positive",
                value=weights
            ))

        for name in ("active_threshold", "default_subscore"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 100:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number between 0 and 100",
                        value=value
                    ))

        if "rvol_period" in params:
            value = params["rvol_period"]
            if not isinstance(value, int) or value <= 0:
                errors.append(ValidationError(
                    field="rvol_period",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scan_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scan cadence and per-symbol timeout."""
        errors = []

        if "symbols" in params and not params["symbols"]:
            errors.append(ValidationError(
                field="symbols",
                message="At least one symbol must be tracked",
                value=params["symbols"]
            ))

        for name in ("orb_interval_seconds", "lotto_interval_seconds", "symbol_timeout_seconds"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        timeout = params.get("symbol_timeout_seconds")
        interval = params.get("orb_interval_seconds")
        if _is_number(timeout) and _is_number(interval) and timeout >= interval:
            errors.append(ValidationError(
                field="symbol_timeout_seconds",
                message="Must be shorter than orb_interval_seconds",
                value=timeout
            ))

        if "default_vix" in params:
            value = params["default_vix"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="default_vix",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_trade_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate strike selection parameters."""
        errors = []

        if "strike_increment" in params:
            value = params["strike_increment"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="strike_increment",
                    message="Must be a positive number",
                    value=value
                ))

        if "otm_strikes" in params:
            value = params["otm_strikes"]
            if not isinstance(value, int) or value < 0:
                errors.append(ValidationError(
                    field="otm_strikes",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "range" in config:
            errors.extend(ConfigValidator.validate_range_params(config["range"]))

        if "breakout" in config:
            errors.extend(ConfigValidator.validate_breakout_params(config["breakout"]))

        if "scoring" in config:
            errors.extend(ConfigValidator.validate_scoring_params(config["scoring"]))

        if "scan" in config:
            errors.extend(ConfigValidator.validate_scan_params(config["scan"]))

        if "trade" in config:
            errors.extend(ConfigValidator.validate_trade_params(config["trade"]))

        return errors
