"""Generation API 엔드포인트 테스트"""

from fastapi.testclient import TestClient

CONTEXT = {"world_seed": 777, "region_id": "dust_basin", "player_level": 3}


class TestGenerateNPC:
    def test_same_key_same_result(self, client: TestClient) -> None:
        body = {"context": CONTEXT, "key": "npc_1", "template_id": "sheriff"}
        first = client.post("/generate/npc", json=body).json()
        second = client.post("/generate/npc", json=body).json()
        assert first["generated"] is True
        assert first == second
        assert first["result"]["template_id"] == "sheriff"

    def test_default_world_seed(self, client: TestClient) -> None:
        response = client.post("/generate/npc", json={"key": "npc_1"})
        assert response.status_code == 200
        assert response.json()["generated"] is True

    def test_no_template_is_not_error(self, client: TestClient) -> None:
        response = client.post("/generate/npc", json={"key": "x", "faction": "martians"})
        assert response.status_code == 200
        assert response.json() == {"generated": False, "seed": None, "result": None}

    def test_key_required(self, client: TestClient) -> None:
        assert client.post("/generate/npc", json={"key": ""}).status_code == 422


class TestGenerateQuest:
    def test_runtime_definition_included(self, client: TestClient) -> None:
        body = {
            "context": CONTEXT,
            "key": "quest_1",
            "template_id": "bounty_outlaw",
            "giver": {"id": "npc_s", "name": "Sheriff Walker", "role": "sheriff"},
            "available_npcs": [{"id": "npc_b", "name": "Black Bart", "tags": ["outlaw"]}],
        }
        data = client.post("/generate/quest", json=body).json()
        assert data["generated"] is True
        runtime = data["result"]["runtime"]
        assert runtime["id"] == data["result"]["id"]
        assert runtime["stages"]


class TestGenerateEncounter:
    def test_encounter(self, client: TestClient) -> None:
        body = {"context": CONTEXT, "key": "enc_1", "biome": "desert"}
        data = client.post("/generate/encounter", json=body).json()
        assert data["generated"] is True
        assert 1 <= data["result"]["difficulty"] <= 10

    def test_inverted_difficulty_rejected(self, client: TestClient) -> None:
        body = {"key": "enc_1", "min_difficulty": 8, "max_difficulty": 2}
        assert client.post("/generate/encounter", json=body).status_code == 400


class TestGenerateDialogueAndLocation:
    def test_dialogue(self, client: TestClient) -> None:
        body = {"context": CONTEXT, "key": "d_1", "npc_template_id": "general_store_owner"}
        data = client.post("/generate/dialogue", json=body).json()
        assert data["result"]["tree"]["npc_id"] == data["result"]["npc"]["id"]

    def test_location(self, client: TestClient) -> None:
        body = {"context": CONTEXT, "key": "town", "location_type": "mining_town"}
        data = client.post("/generate/location", json=body).json()
        assert data["generated"] is True
        assert data["result"]["type"] == "mining_town"
        assert data["result"]["npcs"]
