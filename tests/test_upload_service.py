"""Tests for three-sheet workbook payload storage."""
import io

import pandas as pd
import pytest

from wagerdesk.core.errors import ValidationFailed
from wagerdesk.services.upload_service import UploadService


def _workbook(sheet_count: int = 3) -> bytes:
    frames = [
        ("Betting Script", pd.DataFrame({"Rule": ["Back home favourites"], "Stake": [25]})),
        ("Fixtures", pd.DataFrame({"Home": ["Celtics"], "Away": ["Lakers"], "Score": [None]})),
        ("Stats", pd.DataFrame({"Team": ["Celtics"], "PPG": [118.5]})),
    ]
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, frame in frames[:sheet_count]:
            frame.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


class TestUploadService:

    def test_store_encodes_missing_sheets_as_empty(self, db_session, principal):
        upload = UploadService(db_session).store(principal, "nba.xlsx", "Basketball", "NBA", fixtures=[{"Home": "A"}])

        assert upload.is_active is True
        assert upload.betting_script == "[]"
        assert upload.fixtures == '[{"Home": "A"}]'

    def test_store_requires_scope(self, db_session, principal):
        with pytest.raises(ValidationFailed) as exc:
            UploadService(db_session).store(principal, "nba.xlsx", "Basketball", "")
        assert exc.value.message == "Missing required fields: fileName, sport, league"

    def test_new_upload_deactivates_previous_in_scope(self, db_session, principal):
        service = UploadService(db_session)
        first = service.store(principal, "v1.xlsx", "Basketball", "NBA", stats=[{"v": 1}])
        service.store(principal, "other.xlsx", "Hockey", "NHL")
        second = service.store(principal, "v2.xlsx", "Basketball", "NBA", stats=[{"v": 2}])

        db_session.refresh(first)
        assert first.is_active is False

        active = service.list_active(principal, sport="Basketball", league="NBA")
        assert [u["id"] for u in active] == [second.id]
        assert active[0]["stats"] == [{"v": 2}]
        assert service.count_active(principal) == 2

    def test_scopes_are_per_user(self, db_session, principal, other_principal):
        service = UploadService(db_session)
        mine = service.store(principal, "a.xlsx", "Basketball", "NBA")
        service.store(other_principal, "b.xlsx", "Basketball", "NBA")

        db_session.refresh(mine)
        assert mine.is_active is True
        assert len(service.list_active(principal)) == 1

    def test_workbook_sheets_are_stored_in_order(self, db_session, principal):
        service = UploadService(db_session)
        service.store_workbook(principal, "nba.xlsx", _workbook(), "Basketball", "NBA")

        [upload] = service.list_active(principal)
        assert upload["betting_script"] == [{"Rule": "Back home favourites", "Stake": 25}]
        assert upload["fixtures"] == [{"Home": "Celtics", "Away": "Lakers", "Score": None}]
        assert upload["stats"] == [{"Team": "Celtics", "PPG": 118.5}]

    def test_workbook_needs_three_sheets(self, db_session, principal):
        with pytest.raises(ValidationFailed) as exc:
            UploadService(db_session).store_workbook(principal, "nba.xlsx", _workbook(2), "Basketball", "NBA")
        assert "3 sheets" in exc.value.message

    def test_workbook_must_be_excel(self, db_session, principal):
        with pytest.raises(ValidationFailed):
            UploadService(db_session).store_workbook(principal, "nba.csv", b"a,b\n1,2\n", "Basketball", "NBA")
