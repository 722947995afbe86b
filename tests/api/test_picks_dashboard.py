"""
HTTP tests for the pick ledger, bankroll history and dashboard composition.
"""
from fastapi.testclient import TestClient

API = "/api/v1"

PICK = {
    "sport": "Basketball",
    "league": "NBA",
    "event": "Celtics vs Lakers",
    "betType": "Moneyline",
    "selection": "Celtics",
    "oddsAmerican": "-110",
    "oddsDecimal": "1.91",
    "stake": "100",
    "potentialWin": "91",
}


def _log(client: TestClient, **overrides) -> dict:
    response = client.post(f"{API}/log-pick", json={**PICK, **overrides})
    assert response.status_code == 200, response.text
    return response.json()["pick"]


class TestPickEndpoints:

    def test_log_pick(self, test_client: TestClient):
        response = test_client.post(f"{API}/log-pick", json=PICK)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert set(data["pick"]) == {"id", "entryId", "event", "betType", "selection", "stake"}
        assert data["pick"]["stake"] == 100.0

    def test_log_pick_missing_fields(self, test_client: TestClient):
        response = test_client.post(f"{API}/log-pick", json={**PICK, "stake": None})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_list_with_filters_and_stats(self, test_client: TestClient):
        _log(test_client)
        _log(test_client, league="NHL", event="Bruins vs Rangers")

        data = test_client.get(f"{API}/picks").json()
        assert data["stats"]["totalPicks"] == 2
        assert data["stats"]["pendingPicks"] == 2
        assert data["stats"]["current"] == 1000.0

        filtered = test_client.get(f"{API}/picks", params={"league": "NHL"}).json()
        assert [p["event"] for p in filtered["picks"]] == ["Bruins vs Rangers"]

        none_yet = test_client.get(f"{API}/picks", params={"dateTo": "2000-01-01"}).json()
        assert none_yet["picks"] == []

    def test_invalid_date_filter(self, test_client: TestClient):
        response = test_client.get(f"{API}/picks", params={"dateFrom": "someday"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid date filter"}

    def test_settle_win(self, test_client: TestClient):
        pick = _log(test_client)

        response = test_client.put(f"{API}/picks/{pick['id']}", json={
            "result": "Win", "actualResult": "Celtics 112-104", "profitLoss": 91, "runningBankroll": 1091,
        })

        assert response.status_code == 200
        settled = response.json()["pick"]
        assert settled["result"] == "Win"
        assert settled["bankrollChange"] == 91
        assert settled["roi"] == 91

        stats = test_client.get(f"{API}/picks").json()["stats"]
        assert stats["current"] == 1091
        assert stats["winRate"] == 100
        assert stats["netProfit"] == 91

        history = test_client.get(f"{API}/bankroll/history").json()
        assert history["current"] == 1091
        assert sorted(h["changeType"] for h in history["history"]) == ["Bet_Placed", "Bet_Win"]

        limited = test_client.get(f"{API}/bankroll/history", params={"limit": 1}).json()
        assert len(limited["history"]) == 1

    def test_settle_invalid_result(self, test_client: TestClient):
        pick = _log(test_client)

        response = test_client.put(f"{API}/picks/{pick['id']}", json={"result": "Won"})

        assert response.status_code == 400

    def test_export_csv(self, test_client: TestClient):
        _log(test_client)

        response = test_client.get(f"{API}/picks/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("Entry ID,Date,Sport,League,Event")
        assert len(lines) == 2

    def test_delete(self, test_client: TestClient, other_headers):
        pick = _log(test_client)

        assert test_client.delete(f"{API}/picks/{pick['id']}", headers=other_headers).status_code == 403
        assert test_client.delete(f"{API}/picks/{pick['id']}").status_code == 200
        assert test_client.get(f"{API}/picks/{pick['id']}").status_code == 404


class TestDashboardEndpoints:

    def test_summary(self, test_client: TestClient):
        test_client.post(f"{API}/scripts", json={"league": "NBA", "content": "rule"})
        test_client.post(f"{API}/upload-data", json={"fileName": "a.xlsx", "sport": "Basketball", "league": "NBA"})
        _log(test_client)

        data = test_client.get(f"{API}/dashboard/summary").json()

        assert data["bankroll"] == 1000.0
        assert data["scriptStats"]["totalScripts"] == 1
        assert data["pickStats"]["totalPicks"] == 1
        assert data["activeUploads"] == 1
        assert data["tabs"] == [
            "match-selection", "preview-odds", "cis-generator", "betting-script",
            "pick-logger", "manage-schedules", "manage-scripts",
        ]

    def test_workflow_without_selection(self, test_client: TestClient):
        data = test_client.post(f"{API}/dashboard/workflow", json={}).json()

        assert data["canGenerateCis"] is False
        assert data["canExecuteScript"] is False
        assert data["missing"] == ["match selection", "betting script", "CIS analysis"]
        assert data["injuryValidation"] is None

    def test_workflow_auto_selects_league_script(self, test_client: TestClient):
        schedule = test_client.post(f"{API}/schedules", json={
            "homeTeam": "Celtics", "awayTeam": "Lakers", "league": "NBA", "date": "2025-01-29",
        }).json()["schedule"]
        script = test_client.post(f"{API}/scripts", json={"league": "NBA", "content": "rule"}).json()["script"]

        data = test_client.post(f"{API}/dashboard/workflow", json={
            "scheduleId": schedule["id"],
            "preview": "Both sides at full strength",
            "cis": "KEY STATS: ...",
        }).json()

        assert data["selectedScriptId"] == script["id"]
        assert data["scriptAvailable"] is True
        assert data["canGenerateCis"] is True
        assert data["canExecuteScript"] is True
        assert data["hasOptimalData"] is False
        assert data["missing"] == []
        assert data["injuryValidation"]["detected"] is False
        assert "Ready for execution - Add preview and stats for optimal results" in data["warnings"]
