"""Unit tests for turning model output into betting recommendations."""
import json

import pytest

from wagerdesk.core.errors import ParseFailure
from wagerdesk.services.analysis.recommendation_parser import (
    extract_recommendation_items,
    fallback_recommendation,
    normalize_recommendation,
    parse_recommendations,
)

RECOMMENDATION = {
    "matchup": "Celtics vs Lakers",
    "betType": "Spread",
    "selection": "Celtics -4.5",
    "line": "-4.5",
    "oddsAmerican": "-110",
    "stake": 50,
    "scriptSummary": "Home favourite rule",
    "justification": "Rest advantage",
    "confidence": 8,
}


class TestShapeMatching:
    """Every supported response shape yields the same items."""

    @pytest.mark.parametrize("payload", [
        [RECOMMENDATION],
        {"recommendations": [RECOMMENDATION]},
        {"bets": [RECOMMENDATION]},
        {"analysis": "ok", "picks": [RECOMMENDATION]},
    ])
    def test_supported_shapes(self, payload):
        assert extract_recommendation_items(json.dumps(payload)) == [RECOMMENDATION]

    def test_recommendations_key_wins_over_other_arrays(self):
        payload = {"notes": ["x"], "recommendations": [RECOMMENDATION]}
        assert extract_recommendation_items(json.dumps(payload)) == [RECOMMENDATION]

    def test_code_fence_is_stripped(self):
        content = "```json\n" + json.dumps([RECOMMENDATION]) + "\n```"
        assert extract_recommendation_items(content) == [RECOMMENDATION]

    def test_invalid_json(self):
        with pytest.raises(ParseFailure):
            extract_recommendation_items("Here are my picks: Celtics -4.5")

    def test_object_without_array(self):
        with pytest.raises(ParseFailure):
            extract_recommendation_items(json.dumps({"matchup": "A vs B"}))

    def test_array_without_objects(self):
        with pytest.raises(ParseFailure):
            extract_recommendation_items(json.dumps(["Celtics -4.5"]))


class TestNormalization:

    def test_full_recommendation(self):
        rec = normalize_recommendation(RECOMMENDATION)

        assert rec.matchup == "Celtics vs Lakers"
        assert rec.bet_type == "Spread"
        assert rec.odds_american == "-110"
        assert rec.odds_decimal == pytest.approx(1.9090909)
        assert rec.stake == 50
        assert rec.confidence == 8
        assert rec.potential_win == pytest.approx(50 * (100 / 110))

    def test_defaults(self):
        rec = normalize_recommendation({})

        assert rec.matchup == "Unknown Match"
        assert rec.bet_type == "Moneyline"
        assert rec.selection == "TBD"
        assert rec.line is None
        assert rec.odds_american == "-110"
        assert rec.stake == 25
        assert rec.confidence == 7
        assert rec.script_summary == "Standard betting script applied"
        assert rec.justification == "Based on comprehensive analysis"

    def test_supplied_decimal_odds_are_kept(self):
        rec = normalize_recommendation({"oddsAmerican": "+150", "oddsDecimal": 2.6, "stake": "10"})
        assert rec.odds_decimal == 2.6
        assert rec.stake == 10
        assert rec.potential_win == pytest.approx(16.0)

    def test_potential_win_is_always_recomputed(self):
        rec = normalize_recommendation({"oddsAmerican": "+100", "stake": 20, "potentialWin": 999})
        assert rec.potential_win == pytest.approx(20.0)

    def test_unparseable_odds_use_standard_price(self):
        rec = normalize_recommendation({"oddsAmerican": "evens", "stake": 100})
        assert rec.odds_decimal == 1.91
        assert rec.potential_win == pytest.approx(91.0)

    def test_numeric_line_becomes_text(self):
        assert normalize_recommendation({"line": 220.5}).line == "220.5"

    def test_non_text_fields_are_coerced(self):
        rec = normalize_recommendation({
            "matchup": "Celtics vs Lakers",
            "betType": ["Total"],
            "selection": 220.5,
            "oddsAmerican": -110,
            "stake": 20,
            "scriptSummary": {"rule": 3},
            "justification": 7,
        })

        assert rec.selection == "220.5"
        assert rec.bet_type == "Moneyline"
        assert rec.odds_american == "-110"
        assert rec.script_summary == "Standard betting script applied"
        assert rec.justification == "7"

    def test_non_finite_numbers_count_as_missing(self):
        rec = normalize_recommendation({"stake": "1e999", "confidence": "1e999", "oddsDecimal": "inf", "oddsAmerican": "+100"})

        assert rec.stake == 25
        assert rec.confidence == 7
        assert rec.odds_decimal == pytest.approx(2.0)
        assert rec.potential_win == pytest.approx(25.0)


class TestParseRecommendations:

    def test_valid_output(self):
        recs, fallback = parse_recommendations(json.dumps({"recommendations": [RECOMMENDATION, {}]}))
        assert fallback is False
        assert len(recs) == 2
        assert recs[1].matchup == "Unknown Match"

    def test_invalid_output_yields_single_fallback(self):
        recs, fallback = parse_recommendations("not json", fallback_matchup="Celtics vs Lakers")

        assert fallback is True
        assert len(recs) == 1
        assert recs[0].matchup == "Celtics vs Lakers"
        assert recs[0].confidence == 6
        assert recs[0].potential_win == 22.75

    def test_empty_output_yields_fallback(self):
        recs, fallback = parse_recommendations(None)
        assert fallback is True
        assert recs[0].matchup == "Unknown Match"

    def test_fallback_dict(self):
        assert fallback_recommendation("A vs B").to_dict() == {
            "matchup": "A vs B",
            "bet_type": "Moneyline",
            "selection": "TBD",
            "line": None,
            "odds_american": "-110",
            "odds_decimal": 1.91,
            "stake": 25.0,
            "script_summary": "Analysis completed but formatting error occurred",
            "justification": "Recommendation generated based on available data",
            "confidence": 6,
            "potential_win": 22.75,
        }
