"""Default configuration parameters for the ORB scanner."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SessionParams:
    """Session clock parameters."""
    timezone: str = "America/New_York"


@dataclass(frozen=True)
class RangeParams:
    """Opening range formation parameters."""
    timeframes: tuple[str, ...] = ("15min", "30min", "60min")
    min_range_pct: float = 0.0                       # 0 disables the width filter


@dataclass(frozen=True)
class BreakoutParams:
    """Breakout detection parameters."""
    buffer_pct: float = 0.05                         # % of range width past the boundary
    confirm_close: bool = True                       # Close vs bar extremes
    zero_dte_cutoff_phase: str = "afternoon"         # 0DTE only before this phase


@dataclass(frozen=True)
class ScoringParams:
    """Confidence scoring parameters."""
    volume_weight: float = 2.0
    flow_weight: float = 2.0
    pattern_weight: float = 1.0
    ml_weight: float = 1.0
    active_threshold: float = 70.0                   # confidence > threshold is tradeable
    default_subscore: float = 50.0                   # Neutral score when inputs are missing
    rvol_period: int = 20


@dataclass(frozen=True)
class TradeParams:
    """Trade parameter synthesis, per instrument overridable."""
    strike_increment: float = 1.0
    otm_strikes: int = 1
    daily_expiries: bool = True
    lotto_otm_distance: float = 4.0
    premium_multiplier: float = 0.10


@dataclass(frozen=True)
class ScanParams:
    """Scan orchestration parameters."""
    symbols: tuple[str, ...] = ("SPX", "SPY", "QQQ", "IWM")
    orb_interval_seconds: float = 15.0
    lotto_interval_seconds: float = 60.0
    symbol_timeout_seconds: float = 10.0
    default_vix: float = 18.0
    scan_outside_market_hours: bool = False


@dataclass(frozen=True)
class LottoParams:
    """Index lotto scan parameters."""
    symbols: tuple[str, ...] = ("SPY", "QQQ", "IWM")
    names: dict[str, str] = field(default_factory=lambda: {
        "SPX": "S&P 500 Index",
        "SPY": "SPDR S&P 500 ETF",
        "QQQ": "Invesco QQQ Trust",
        "IWM": "iShares Russell 2000 ETF",
    })
    history_days: int = 60                           # Daily bars requested; MACD needs 35
    rsi_period: int = 14
    high_confidence: float = 70.0
    medium_confidence: float = 55.0
    derive_spx_from_spy: bool = True


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    session: SessionParams
    range: RangeParams
    breakout: BreakoutParams
    scoring: ScoringParams
    trade: TradeParams
    scan: ScanParams
    lotto: LottoParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        session=SessionParams(),
        range=RangeParams(),
        breakout=BreakoutParams(),
        scoring=ScoringParams(),
        trade=TradeParams(),
        scan=ScanParams(),
        lotto=LottoParams(),
    )
