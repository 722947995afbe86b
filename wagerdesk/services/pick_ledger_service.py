"""
Pick ledger: logging, settlement, statistics and bankroll history.

Every pick placement and every settlement that changes the result appends a
BankrollHistory row. Statistics are always computed from the (filtered)
pick set at read time and never stored.
"""
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.config import settings
from wagerdesk.core.errors import NotFound, ValidationFailed
from wagerdesk.core.metrics import picks_logged_total, picks_settled_total
from wagerdesk.models import BankrollHistory, Pick, PICK_RESULTS, SETTLED_RESULTS, User
from wagerdesk.repositories import (
    BankrollHistoryRepository,
    PickFilters,
    PickRepository,
    ScheduleRepository,
    UserRepository,
)
from wagerdesk.utils.odds import coerce_float

logger = logging.getLogger(__name__)

REQUIRED_PICK_FIELDS = ("sport", "league", "event", "bet_type", "selection", "odds_american", "stake")
SETTLEMENT_FIELDS = (
    "result", "actual_result", "profit_loss", "running_bankroll", "bankroll_change", "roi", "notes",
)

SETTLEMENT_CHANGE_TYPES = {
    "Win": "Bet_Win",
    "Loss": "Bet_Loss",
}


def calculate_stats(picks: Iterable[Pick], current_bankroll: float) -> Dict[str, Any]:
    """
    Aggregate ledger statistics.

    ROI is net profit over total stake (0 with nothing wagered); win rate is
    wins over Win/Loss/Push picks (0 with nothing settled).
    """
    picks = list(picks)
    won = [p for p in picks if p.result == "Win"]
    lost = [p for p in picks if p.result == "Loss"]
    settled = [p for p in picks if p.result in SETTLED_RESULTS]
    pending = [p for p in picks if p.result == "Pending"]

    total_wagered = sum(p.stake or 0 for p in picks)
    total_won = sum(p.profit_loss or 0 for p in won)
    total_loss = abs(sum(p.profit_loss or 0 for p in lost))
    net_profit = total_won - total_loss

    return {
        "current": current_bankroll,
        "total_wagered": total_wagered,
        "total_won": total_won,
        "total_loss": total_loss,
        "net_profit": net_profit,
        "roi": (net_profit / total_wagered) * 100 if total_wagered > 0 else 0,
        "win_rate": (len(won) / len(settled)) * 100 if settled else 0,
        "total_picks": len(picks),
        "settled_picks": len(settled),
        "pending_picks": len(pending),
    }


EXPORT_COLUMNS = [
    "Entry ID", "Date", "Sport", "League", "Event", "Bet Type", "Selection", "Line/Total",
    "American Odds", "Decimal Odds", "Stake", "Potential Win", "Result", "Actual Result",
    "Profit/Loss", "Running Bankroll", "Bankroll Change", "ROI", "Confidence", "Tags", "Notes",
]


def _money(value: Optional[float]) -> str:
    return f"${value:.2f}" if value else "N/A"


def picks_to_frame(picks: Iterable[Pick]) -> pd.DataFrame:
    """Export layout: one row per pick, display-formatted."""
    rows = [
        {
            "Entry ID": p.entry_id,
            "Date": p.date.strftime("%Y-%m-%d") if p.date else "",
            "Sport": p.sport,
            "League": p.league,
            "Event": p.event,
            "Bet Type": p.bet_type,
            "Selection": p.selection,
            "Line/Total": p.line or "N/A",
            "American Odds": p.odds_american,
            "Decimal Odds": f"{p.odds_decimal:.2f}" if p.odds_decimal else "N/A",
            "Stake": f"${p.stake:g}",
            "Potential Win": _money(p.potential_win),
            "Result": p.result,
            "Actual Result": p.actual_result or "N/A",
            "Profit/Loss": _money(p.profit_loss),
            "Running Bankroll": _money(p.running_bankroll),
            "Bankroll Change": _money(p.bankroll_change),
            "ROI": f"{p.roi:.2f}%" if p.roi else "N/A",
            "Confidence": f"{p.confidence}/10" if p.confidence else "N/A",
            "Tags": p.tags or "N/A",
            "Notes": p.notes or "N/A",
        }
        for p in picks
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


class PickLedgerService:
    """Logs picks, settles them and keeps the bankroll audit trail."""

    def __init__(self, db: Session):
        self.db = db
        self.picks = PickRepository(db)
        self.history = BankrollHistoryRepository(db)
        self.users = UserRepository(db)
        self.schedules = ScheduleRepository(db)

    def _user(self, principal: Principal) -> User:
        user = self.users.find_by_id(principal.user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def current_bankroll(self, principal: Principal) -> float:
        user = self._user(principal)
        return user.current_bankroll or settings.DEFAULT_BANKROLL

    # ========================================================================
    # Create
    # ========================================================================

    def log_pick(self, principal: Principal, data: Dict[str, Any]) -> Pick:
        """
        Persist a Pending pick and append a Bet_Placed history row.

        Raises:
            ValidationFailed: a required field is missing or stake is not a number
            NotFound / Forbidden: `match_id` is not one of the user's schedules
        """
        if any(not data.get(field) for field in REQUIRED_PICK_FIELDS):
            raise ValidationFailed()

        stake = coerce_float(data.get("stake"))
        if stake is None:
            raise ValidationFailed("Invalid stake")

        match_id = data.get("match_id") or None
        if match_id:
            self.schedules.get_owned(match_id, principal.user_id)

        user = self._user(principal)
        bankroll = user.current_bankroll or settings.DEFAULT_BANKROLL

        pick = self.picks.create(
            user_id=principal.user_id,
            match_id=match_id,
            entry_id=uuid.uuid4().hex,
            sport=data["sport"],
            league=data["league"],
            event=data["event"],
            bet_type=data["bet_type"],
            selection=data["selection"],
            line=data.get("line") or None,
            odds_american=str(data["odds_american"]),
            odds_decimal=coerce_float(data.get("odds_decimal")),
            stake=stake,
            potential_win=coerce_float(data.get("potential_win")),
            cis_generated=data.get("cis_generated") or None,
            script_summary=data.get("script_summary") or None,
            justification=data.get("justification") or None,
            confidence=data.get("confidence") or None,
            tags=data.get("tags") or None,
            notes=data.get("notes") or None,
            result="Pending",
        )
        self.picks.flush()

        self.history.append(
            user_id=principal.user_id,
            amount=bankroll,
            change=0,
            change_type="Bet_Placed",
            description=f"Bet placed: {pick.event} - {pick.bet_type}",
            related_pick_id=pick.id,
        )
        self.picks.save()
        self.picks.refresh(pick)

        picks_logged_total.labels(sport=pick.sport).inc()
        logger.info(f"Logged pick {pick.id}: {pick.event} - {pick.bet_type}", extra={"stake": stake})
        return pick

    # ========================================================================
    # Read
    # ========================================================================

    def get(self, principal: Principal, pick_id: str) -> Pick:
        return self.picks.get_owned(pick_id, principal.user_id)

    def list_with_stats(self, principal: Principal, filters: Optional[PickFilters] = None) -> Dict[str, Any]:
        picks = self.picks.search(principal.user_id, filters)
        return {
            "picks": picks,
            "stats": calculate_stats(picks, self.current_bankroll(principal)),
        }

    def export_csv(self, principal: Principal, filters: Optional[PickFilters] = None) -> str:
        picks = self.picks.search(principal.user_id, filters)
        return picks_to_frame(picks).to_csv(index=False)

    def bankroll_history(self, principal: Principal, limit: Optional[int] = None) -> List[BankrollHistory]:
        return self.history.recent(principal.user_id, limit)

    # ========================================================================
    # Settle / delete
    # ========================================================================

    def settle(self, principal: Principal, pick_id: str, changes: Dict[str, Any]) -> Pick:
        """
        Apply settlement fields to a pick.

        `running_bankroll`, when supplied, becomes the user's current
        bankroll. A result that differs from the previous one and is not
        Pending appends a history row (Bet_Win, Bet_Loss, otherwise
        Adjustment). A bare `profit_loss` fills in `bankroll_change` and
        `roi` when those were not supplied.

        Raises:
            NotFound / Forbidden: ownership check
            ValidationFailed: unknown result
        """
        pick = self.picks.get_owned(pick_id, principal.user_id)
        previous_result = pick.result

        patch = {k: v for k, v in changes.items() if k in SETTLEMENT_FIELDS}
        new_result = patch.get("result")
        if "result" in patch and not new_result:
            # A blank result keeps the current one
            patch.pop("result")
            new_result = None
        if new_result is not None and new_result not in PICK_RESULTS:
            raise ValidationFailed(f"Invalid result: {new_result}")

        profit_loss = patch.get("profit_loss")
        if profit_loss is not None:
            patch.setdefault("bankroll_change", profit_loss)
            if "roi" not in patch and pick.stake:
                patch["roi"] = profit_loss / pick.stake * 100

        self.picks.apply(pick, patch)

        user = self._user(principal)
        running_bankroll = patch.get("running_bankroll")
        if running_bankroll is not None:
            user.current_bankroll = running_bankroll

        if new_result and new_result != previous_result and new_result != "Pending":
            change_type = SETTLEMENT_CHANGE_TYPES.get(new_result, "Adjustment")
            amount = running_bankroll if running_bankroll is not None else (
                user.current_bankroll or settings.DEFAULT_BANKROLL
            )
            self.history.append(
                user_id=principal.user_id,
                amount=amount,
                change=patch.get("bankroll_change") or 0,
                change_type=change_type,
                description=f"Bet {new_result.lower()}: {pick.event}",
                related_pick_id=pick.id,
            )
            picks_settled_total.labels(result=new_result).inc()

        self.picks.save()
        self.picks.refresh(pick)
        logger.info(f"Updated pick {pick.id}: {previous_result} -> {pick.result}")
        return pick

    def delete(self, principal: Principal, pick_id: str) -> None:
        pick = self.picks.get_owned(pick_id, principal.user_id)
        self.picks.delete_instance(pick)
        self.picks.save()
        logger.info(f"Deleted pick {pick_id}")
