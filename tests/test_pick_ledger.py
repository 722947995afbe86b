"""Tests for pick logging, settlement, statistics and bankroll history."""
import pytest

from wagerdesk.core.errors import Forbidden, ValidationFailed
from wagerdesk.repositories import PickFilters
from wagerdesk.services.pick_ledger_service import EXPORT_COLUMNS, PickLedgerService, calculate_stats
from wagerdesk.services.schedule_service import ScheduleService


def _pick_data(**overrides):
    data = {
        "sport": "Basketball",
        "league": "NBA",
        "event": "Celtics vs Lakers",
        "bet_type": "Moneyline",
        "selection": "Celtics",
        "odds_american": "-110",
        "odds_decimal": 1.91,
        "stake": 100,
        "potential_win": 91,
    }
    data.update(overrides)
    return data


@pytest.fixture
def ledger(db_session):
    return PickLedgerService(db_session)


class TestLogPick:

    def test_logs_pending_pick_with_history_row(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data(stake="100"))

        assert pick.result == "Pending"
        assert pick.stake == 100.0
        assert len(pick.entry_id) == 32

        [row] = ledger.bankroll_history(principal)
        assert row.change_type == "Bet_Placed"
        assert row.amount == 1000.0
        assert row.change == 0
        assert row.related_pick_id == pick.id
        assert row.description == "Bet placed: Celtics vs Lakers - Moneyline"

    def test_missing_field(self, ledger, principal):
        with pytest.raises(ValidationFailed) as exc:
            ledger.log_pick(principal, _pick_data(selection=""))
        assert exc.value.message == "Missing required fields"

    def test_non_numeric_stake(self, ledger, principal):
        with pytest.raises(ValidationFailed):
            ledger.log_pick(principal, _pick_data(stake="a lot"))

    def test_match_must_belong_to_user(self, db_session, ledger, principal, other_principal):
        schedule = ScheduleService(db_session).create(other_principal, {
            "home_team": "Celtics", "away_team": "Lakers", "league": "NBA", "date": "2025-01-29",
        })
        with pytest.raises(Forbidden):
            ledger.log_pick(principal, _pick_data(match_id=schedule.id))


class TestSettlement:

    def test_win_updates_bankroll_and_history(self, db_session, ledger, principal, user):
        pick = ledger.log_pick(principal, _pick_data())

        settled = ledger.settle(principal, pick.id, {"result": "Win", "profit_loss": 91, "running_bankroll": 1091})

        assert settled.result == "Win"
        assert settled.bankroll_change == 91
        assert settled.roi == pytest.approx(91.0)
        db_session.refresh(user)
        assert user.current_bankroll == 1091

        rows = ledger.bankroll_history(principal)
        win_rows = [r for r in rows if r.change_type == "Bet_Win"]
        assert len(win_rows) == 1
        assert win_rows[0].amount == 1091
        assert win_rows[0].change == 91
        assert win_rows[0].description == "Bet win: Celtics vs Lakers"

    def test_explicit_change_and_roi_are_kept(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data())
        settled = ledger.settle(principal, pick.id, {
            "result": "Loss", "profit_loss": -100, "bankroll_change": -90, "roi": -50,
        })
        assert settled.bankroll_change == -90
        assert settled.roi == -50

    def test_history_only_when_result_changes(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data())

        ledger.settle(principal, pick.id, {"result": "Loss", "profit_loss": -100})
        ledger.settle(principal, pick.id, {"result": "Loss", "notes": "bad beat"})
        ledger.settle(principal, pick.id, {"result": "Pending"})

        types = sorted(r.change_type for r in ledger.bankroll_history(principal))
        assert types == ["Bet_Loss", "Bet_Placed"]

    def test_push_and_void_are_adjustments(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data())
        ledger.settle(principal, pick.id, {"result": "Push"})

        types = sorted(r.change_type for r in ledger.bankroll_history(principal))
        assert types == ["Adjustment", "Bet_Placed"]

    def test_invalid_result(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data())
        with pytest.raises(ValidationFailed):
            ledger.settle(principal, pick.id, {"result": "Won"})

    def test_other_users_pick(self, ledger, principal, other_principal):
        pick = ledger.log_pick(principal, _pick_data())
        with pytest.raises(Forbidden):
            ledger.settle(other_principal, pick.id, {"result": "Win"})
        with pytest.raises(Forbidden):
            ledger.delete(other_principal, pick.id)


class TestStatistics:

    def test_empty_ledger(self):
        stats = calculate_stats([], 1000.0)
        assert stats["roi"] == 0
        assert stats["win_rate"] == 0
        assert stats["total_picks"] == 0
        assert stats["current"] == 1000.0

    def test_mixed_results(self, ledger, principal):
        win = ledger.log_pick(principal, _pick_data(stake=100))
        loss = ledger.log_pick(principal, _pick_data(stake=50, event="Knicks vs Nets"))
        ledger.log_pick(principal, _pick_data(stake=25, event="Bulls vs Heat"))
        ledger.settle(principal, win.id, {"result": "Win", "profit_loss": 91, "running_bankroll": 1091})
        ledger.settle(principal, loss.id, {"result": "Loss", "profit_loss": -50, "running_bankroll": 1041})

        stats = ledger.list_with_stats(principal)["stats"]

        assert stats["current"] == 1041
        assert stats["total_wagered"] == 175
        assert stats["total_won"] == 91
        assert stats["total_loss"] == 50
        assert stats["net_profit"] == 41
        assert stats["roi"] == pytest.approx(41 / 175 * 100)
        assert stats["win_rate"] == 50
        assert (stats["total_picks"], stats["settled_picks"], stats["pending_picks"]) == (3, 2, 1)

    def test_filters(self, ledger, principal):
        ledger.log_pick(principal, _pick_data())
        ledger.log_pick(principal, _pick_data(league="NHL", bet_type="Total"))

        result = ledger.list_with_stats(principal, PickFilters(league="NHL"))
        assert [p.league for p in result["picks"]] == ["NHL"]
        assert result["stats"]["total_picks"] == 1

        assert ledger.list_with_stats(principal, PickFilters(result="Win"))["picks"] == []


class TestExport:

    def test_csv_layout(self, ledger, principal):
        ledger.log_pick(principal, _pick_data(line="-4.5", confidence=8))

        lines = ledger.export_csv(principal).splitlines()

        assert lines[0] == ",".join(EXPORT_COLUMNS)
        assert len(lines) == 2
        assert "$100" in lines[1]
        assert "8/10" in lines[1]
        assert "Pending" in lines[1]

    def test_delete_keeps_history(self, ledger, principal):
        pick = ledger.log_pick(principal, _pick_data())
        ledger.delete(principal, pick.id)

        assert ledger.list_with_stats(principal)["picks"] == []
        assert len(ledger.bankroll_history(principal)) == 1
