"""Quest API 엔드포인트 테스트"""

from fastapi.testclient import TestClient


class TestPrerequisites:
    def test_failures_listed(self, client: TestClient) -> None:
        body = {"quest_id": "deep_shaft", "player": {"level": 1}}
        data = client.post("/quest/check-prerequisites", json=body).json()
        assert data["met"] is False
        assert len(data["failures"]) == 3

    def test_met(self, client: TestClient) -> None:
        body = {"quest_id": "silver_vein_sabotage", "player": {"level": 5}}
        assert client.post("/quest/check-prerequisites", json=body).json()["met"] is True

    def test_unknown_quest(self, client: TestClient) -> None:
        body = {"quest_id": "nope"}
        assert client.post("/quest/check-prerequisites", json=body).status_code == 404


class TestProgress:
    def test_stage_advances(self, client: TestClient) -> None:
        body = {
            "quest_id": "silver_vein_sabotage",
            "active": {"quest_id": "silver_vein_sabotage", "objective_progress": {"talk_night_shift": 2}},
            "objective_id": "find_letter",
        }
        data = client.post("/quest/progress", json=body).json()
        assert data["changed"] is True
        assert data["stage_completed"] is True
        assert data["next_stage_id"] == "report_evidence"
        assert data["active"]["current_stage_index"] == 1

    def test_mismatched_active_quest(self, client: TestClient) -> None:
        body = {
            "quest_id": "silver_vein_sabotage",
            "active": {"quest_id": "deep_shaft"},
            "objective_id": "find_letter",
        }
        assert client.post("/quest/progress", json=body).status_code == 400

    def test_terminal_quest_rejected(self, client: TestClient) -> None:
        body = {
            "quest_id": "silver_vein_sabotage",
            "active": {"quest_id": "silver_vein_sabotage", "status": "failed"},
            "objective_id": "find_letter",
        }
        assert client.post("/quest/progress", json=body).status_code == 400

    def test_inline_quest(self, client: TestClient) -> None:
        quest = {
            "id": "inline",
            "title": "Inline",
            "stages": [
                {
                    "id": "s",
                    "title": "S",
                    "objectives": [{"id": "o", "description": "o", "type": "visit", "target": "x"}],
                }
            ],
            "rewards": {"gold": 5},
        }
        body = {"quest": quest, "active": {"quest_id": "inline"}, "objective_id": "o"}
        data = client.post("/quest/progress", json=body).json()
        assert data["quest_completed"] is True
        assert data["rewards"][-1]["gold"] == 5
