"""Tests for gamma positioning."""

import pytest

from orb_scanner.risk.gamma import GammaRegime, GammaZone, classify_gamma, gamma_zone


class TestClassifyGamma:
    """Test suite for gamma flip classification."""

    def test_above_flip_is_mean_reversion(self) -> None:
        position = classify_gamma(4550.0, 4500.0)

        assert position.above
        assert position.regime is GammaRegime.MEAN_REVERSION
        assert position.distance == pytest.approx(50.0)
        assert position.pct_distance == pytest.approx(50.0 / 4500.0 * 100)
        assert gamma_zone(position) is GammaZone.POSITIVE

    def test_below_flip_is_momentum(self) -> None:
        position = classify_gamma(4450.0, 4500.0)

        assert not position.above
        assert position.regime is GammaRegime.MOMENTUM
        assert gamma_zone(position) is GammaZone.NEGATIVE

    def test_at_flip_counts_as_above(self) -> None:
        assert classify_gamma(4500.0, 4500.0).above

    @pytest.mark.parametrize("price,flip", [
        (4500.0, None),
        (None, 4500.0),
        (4500.0, 0.0),
        (-1.0, 4500.0),
        (4500.0, float("nan")),
    ])
    def test_unavailable_inputs(self, price, flip) -> None:
        assert classify_gamma(price, flip) is None
        assert gamma_zone(None) is GammaZone.NEUTRAL
