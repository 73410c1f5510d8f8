"""Tests for pricing, value evaluation and ranking."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from footy.errors import InvalidOddsError
from footy.odds.pricing import MarketQuote, PriceProvider, SyntheticPriceProvider, validate_odds
from footy.odds.ranking import SortKey, filter_positive_ev, rank_value_bets, sort_assessments
from footy.odds.value import (
    ConfidenceTier,
    ValueAssessment,
    compute_edge,
    confidence_tier,
    generate_assessment,
)
from footy.simulation.engine import (
    MatchParameters,
    Orientation,
    SimulationResult,
    SimulationSettings,
)
from footy.simulation.sampler import make_rng

FAST = SimulationSettings(iterations=2000)


def _assessment(match_id, ev, edge=0.0, kickoff=None, league=None) -> ValueAssessment:
    return ValueAssessment(
        match_id=match_id,
        model_probability=0.2,
        orientation=Orientation.DESIGNATED_IS_HOME,
        market_odds=5.0,
        implied_probability=0.2,
        edge=edge,
        expected_value=ev,
        confidence_tier=ConfidenceTier.HIGH,
        kickoff=kickoff,
        league=league,
    )


class TestOddsValidation:
    """Invalid prices fail before any division."""

    @pytest.mark.parametrize("odds", [1.0, 0, 0.0, -1.5, -100, float("nan"), float("inf")])
    def test_invalid_odds_raise(self, odds):
        with pytest.raises(InvalidOddsError):
            validate_odds(odds)
        with pytest.raises(InvalidOddsError):
            compute_edge(0.3, odds)

    def test_non_numeric_odds_raise(self):
        with pytest.raises(InvalidOddsError):
            validate_odds("evens")
        with pytest.raises(InvalidOddsError):
            validate_odds(None)

    def test_valid_odds_pass_through(self):
        assert validate_odds(1.01) == 1.01
        assert validate_odds(3) == 3.0


class TestEdgeCalculation:
    """edge = p - 1/odds; EV = p * odds - 1."""

    @pytest.mark.parametrize(
        "p, odds",
        [(0.3, 4.0), (0.05, 12.5), (0.5, 1.8), (0.0, 2.0), (1.0, 1.5), (0.22, 3.3)],
    )
    def test_edge_and_ev_identities(self, p, odds):
        implied, edge, ev = compute_edge(p, odds)
        assert implied == pytest.approx(1 / odds)
        assert edge == pytest.approx(p - 1 / odds)
        assert ev == pytest.approx(p * odds - 1)

    def test_positive_edge_example(self):
        implied, edge, ev = compute_edge(0.25, 5.0)
        assert implied == pytest.approx(0.20)
        assert edge == pytest.approx(0.05)
        assert ev == pytest.approx(0.25)


class TestConfidenceTier:
    def test_threshold_is_exclusive(self):
        assert confidence_tier(0.15) is ConfidenceTier.MEDIUM
        assert confidence_tier(0.1501) is ConfidenceTier.HIGH
        assert confidence_tier(0.0) is ConfidenceTier.MEDIUM
        assert confidence_tier(0.9) is ConfidenceTier.HIGH

    def test_custom_threshold(self):
        assert confidence_tier(0.2, threshold=0.25) is ConfidenceTier.MEDIUM


class TestSyntheticPrice:
    """Margin-then-markup placeholder pricing."""

    def test_quote_shape(self):
        quote = SyntheticPriceProvider().quote(1, 0.25)
        assert quote.average_odds == pytest.approx(1 / (0.25 * 0.8))
        assert quote.best_odds == pytest.approx(quote.average_odds * 1.1)
        assert quote.bookmaker == "synthetic"

    def test_zero_probability_cannot_be_priced(self):
        with pytest.raises(InvalidOddsError):
            SyntheticPriceProvider().quote(1, 0.0)

    @pytest.mark.parametrize("margin, markup", [(-0.1, 1.1), (1.0, 1.1), (0.2, 0.9)])
    def test_invalid_constants(self, margin, markup):
        with pytest.raises(ValueError):
            SyntheticPriceProvider(margin=margin, markup=markup)


class TestGenerateAssessment:
    """Orientation selection and assessment assembly."""

    def test_deterministic_with_seed(self, reference_params):
        a = generate_assessment(1, reference_params, rng=make_rng(5), simulation_settings=FAST)
        b = generate_assessment(1, reference_params, rng=make_rng(5), simulation_settings=FAST)
        assert a == b

    def test_synthetic_price_used_without_odds(self, reference_params):
        result = generate_assessment(
            42, reference_params, rng=make_rng(3), simulation_settings=FAST
        )
        p = result.model_probability

        assert result.match_id == 42
        assert result.average_odds == pytest.approx(1 / (p * 0.8))
        assert result.market_odds == pytest.approx(result.average_odds * 1.1)
        assert result.implied_probability == pytest.approx(1 / result.market_odds)
        assert result.edge == pytest.approx(p - 1 / result.market_odds)
        # The placeholder price always implies EV = 1.1 / 0.8 - 1
        assert result.expected_value == pytest.approx(0.375)

    def test_supplied_odds_bypass_provider(self, reference_params):
        class FailingProvider(PriceProvider):
            def quote(self, match_id, model_probability):
                raise AssertionError("provider must not be called")

        result = generate_assessment(
            7,
            reference_params,
            3.0,
            rng=make_rng(3),
            simulation_settings=FAST,
            price_provider=FailingProvider(),
        )
        assert result.market_odds == 3.0
        assert result.average_odds is None
        assert result.expected_value == pytest.approx(result.model_probability * 3.0 - 1)

    def test_custom_price_provider(self, reference_params):
        class FixedProvider(PriceProvider):
            def quote(self, match_id, model_probability):
                return MarketQuote(best_odds=4.5, average_odds=4.2, bookmaker="book")

        result = generate_assessment(
            7,
            reference_params,
            rng=make_rng(3),
            simulation_settings=FAST,
            price_provider=FixedProvider(),
        )
        assert result.market_odds == 4.5
        assert result.average_odds == 4.2

    @pytest.mark.parametrize("odds", [1.0, 0, -3.0])
    def test_invalid_odds_fail_before_simulation(self, reference_params, odds):
        with patch("footy.odds.value.simulate") as mock_simulate:
            with pytest.raises(InvalidOddsError):
                generate_assessment(1, reference_params, odds, rng=make_rng(0))
        mock_simulate.assert_not_called()

    def test_tie_favours_home(self, reference_params):
        """Equal probabilities for both orientations select the home side."""
        tied = SimulationResult(probability=0.2, iterations=2000)
        with patch("footy.odds.value.simulate", return_value=tied):
            result = generate_assessment(1, reference_params, 6.0, rng=make_rng(0))

        assert result.orientation is Orientation.DESIGNATED_IS_HOME
        assert result.designated_is_home
        assert result.model_probability == 0.2

    def test_tie_at_zero_probability_favours_home(self):
        """Corner rates far below the line make both orientations exactly 0."""
        params = MatchParameters(1.2, 1.2, 0.01, 0.01)
        result = generate_assessment(
            1, params, 2.0, rng=make_rng(1), simulation_settings=FAST
        )
        assert result.model_probability == 0.0
        assert result.orientation is Orientation.DESIGNATED_IS_HOME
        assert result.expected_value == pytest.approx(-1.0)
        assert result.confidence_tier is ConfidenceTier.MEDIUM

    def test_zero_probability_without_odds_raises(self):
        params = MatchParameters(1.2, 1.2, 0.01, 0.01)
        with pytest.raises(InvalidOddsError):
            generate_assessment(1, params, rng=make_rng(1), simulation_settings=FAST)

    def test_stronger_away_side_selected(self):
        params = MatchParameters(0.3, 2.2, 5.5, 5.0)
        result = generate_assessment(
            1, params, 4.0, rng=make_rng(2), simulation_settings=FAST
        )
        assert result.orientation is Orientation.DESIGNATED_IS_AWAY
        assert not result.designated_is_home

    def test_reporting_fields_carried(self, reference_params):
        kickoff = datetime(2026, 10, 18, 14, 0, tzinfo=timezone.utc)
        result = generate_assessment(
            9,
            reference_params,
            5.0,
            rng=make_rng(0),
            simulation_settings=FAST,
            kickoff=kickoff,
            home_team="Arsenal",
            away_team="Chelsea",
            league="Premier League",
        )
        assert result.kickoff == kickoff
        assert (result.home_team, result.away_team, result.league) == (
            "Arsenal",
            "Chelsea",
            "Premier League",
        )


class TestRanking:
    """Positive-EV filtering, ordering and truncation."""

    def test_filter_positive_ev(self):
        evs = [0.3, -0.1, 0.05, 0, 0.4]
        assessments = [_assessment(i, ev) for i, ev in enumerate(evs)]

        kept = filter_positive_ev(assessments)

        assert len(kept) == 3
        assert {a.expected_value for a in kept} == {0.3, 0.05, 0.4}

    def test_truncates_to_limit(self):
        assessments = [_assessment(i, 0.1) for i in range(60)]
        ranked = rank_value_bets(assessments)
        assert len(ranked) == 50
        assert [a.match_id for a in ranked] == list(range(50))

    def test_sort_by_ev_then_truncate(self):
        assessments = [_assessment(i, ev) for i, ev in enumerate([0.1, 0.5, -0.2, 0.3])]
        ranked = rank_value_bets(assessments, sort_key=SortKey.EV, limit=2)
        assert [a.match_id for a in ranked] == [1, 3]

    def test_sort_by_edge(self):
        assessments = [
            _assessment(1, 0.2, edge=0.01),
            _assessment(2, 0.2, edge=0.04),
            _assessment(3, 0.2, edge=0.02),
        ]
        ranked = sort_assessments(assessments, SortKey.EDGE)
        assert [a.match_id for a in ranked] == [2, 3, 1]

    def test_sort_by_date_puts_missing_kickoff_last(self):
        base = datetime(2026, 10, 17, tzinfo=timezone.utc)
        assessments = [
            _assessment(1, 0.2, kickoff=base + timedelta(days=2)),
            _assessment(2, 0.2, kickoff=None),
            _assessment(3, 0.2, kickoff=base),
            _assessment(4, 0.2, kickoff=(base + timedelta(days=1)).replace(tzinfo=None)),
        ]
        ranked = rank_value_bets(assessments, sort_key="date")
        assert [a.match_id for a in ranked] == [3, 4, 1, 2]

    def test_league_and_min_edge_filters(self):
        assessments = [
            _assessment(1, 0.2, edge=0.05, league="Serie A"),
            _assessment(2, 0.2, edge=0.01, league="Serie A"),
            _assessment(3, 0.2, edge=0.09, league="La Liga"),
        ]
        ranked = rank_value_bets(assessments, league="Serie A", min_edge=0.02)
        assert [a.match_id for a in ranked] == [1]

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            rank_value_bets([], limit=-1)
