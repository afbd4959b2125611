"""
Tests for Portfolio API endpoints.

Tests GET/PUT /api/portfolio, export/import, and project/skill editing.

Run with: pytest tests/test_portfolio_api.py -v
"""

import json

import pytest

from portfolio.document import PortfolioDocument, serialize
from services.portfolio_store import PortfolioStore

TEST_USER_ID = "user-123"


@pytest.fixture
def saved(gateway, auth_context, sample_document):
    gateway.save(auth_context, TEST_USER_ID, sample_document)
    return sample_document


class TestWholeDocument:
    def test_get_missing_portfolio_returns_404(self, client):
        response = client.get("/api/portfolio")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    def test_get_returns_document(self, client, saved):
        response = client.get("/api/portfolio")

        assert response.status_code == 200
        assert response.json()["portfolio"] == saved.to_dict()

    def test_put_saves_object_and_fills_defaults(self, client, gateway, auth_context):
        response = client.put(
            "/api/portfolio",
            json={"portfolio": {"content": {"name": "Sam"}, "layout": {"heroHeight": "80"}}},
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["portfolio"]["content"]["name"] == "Sam"
        assert payload["portfolio"]["textEffects"]["shadow"] == "none"
        assert payload["warnings"] == []
        assert gateway.load(auth_context, TEST_USER_ID).layout.hero_height == "80"

    def test_put_accepts_json_string(self, client):
        response = client.put(
            "/api/portfolio",
            json={"portfolio": json.dumps({"fonts": {"heading": "Inter"}})},
        )

        assert response.status_code == 200
        assert response.json()["portfolio"]["fonts"]["heading"] == "Inter"

    def test_put_invalid_json_string_returns_400(self, client):
        response = client.put("/api/portfolio", json={"portfolio": "{broken"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "parse_error"

    def test_put_reports_reset_fields(self, client):
        response = client.put("/api/portfolio", json={"portfolio": {"projects": "nope"}})

        assert response.status_code == 200
        payload = response.json()
        assert payload["portfolio"]["projects"] == []
        assert payload["warnings"][0]["field"] == "projects"

    def test_put_without_portfolio_returns_422(self, client):
        response = client.put("/api/portfolio", json={})

        assert response.status_code == 422

    def test_storage_failure_returns_500(self, client, gateway):
        class FailingStore(PortfolioStore):
            def read(self, user_id):
                return None

            def write(self, user_id, raw):
                raise OSError("read-only")

            def delete(self, user_id):
                return False

        gateway.store = FailingStore()
        response = client.put("/api/portfolio", json={"portfolio": {}})

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "storage_error"


class TestExportImport:
    def test_export_downloads_json_file(self, client, saved):
        response = client.get("/api/portfolio/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="alex-morgan-portfolio.json"' in response.headers["content-disposition"]
        assert response.text == serialize(saved, indent=2)

    def test_export_missing_portfolio(self, client):
        assert client.get("/api/portfolio/export").status_code == 404

    def test_import_replaces_document(self, client, saved, gateway, auth_context):
        uploaded = {"content": {"name": "Imported"}, "textEffects": {"shadow": "glitter"}}
        response = client.post(
            "/api/portfolio/import",
            files={"file": ("portfolio.json", json.dumps(uploaded), "application/json")},
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["portfolio"]["content"]["name"] == "Imported"
        assert payload["portfolio"]["projects"] == []
        assert payload["warnings"][0]["field"] == "textEffects.shadow"
        assert gateway.load(auth_context, TEST_USER_ID).content.name == "Imported"

    def test_import_of_exported_file_round_trips(self, client, saved):
        exported = client.get("/api/portfolio/export").content

        response = client.post(
            "/api/portfolio/import",
            files={"file": ("export.json", exported, "application/json")},
        )

        assert response.status_code == 200
        assert response.json()["portfolio"] == saved.to_dict()
        assert response.json()["warnings"] == []

    def test_import_invalid_file(self, client, saved):
        response = client.post(
            "/api/portfolio/import",
            files={"file": ("bad.json", b"not json at all", "application/json")},
        )

        assert response.status_code == 400
        assert client.get("/api/portfolio").json()["portfolio"] == saved.to_dict()

    def test_import_deeply_nested_file(self, client, saved):
        depth = 100000
        nested = '{"extra": ' + "[" * depth + "]" * depth + "}"
        response = client.post(
            "/api/portfolio/import",
            files={"file": ("deep.json", nested.encode("utf-8"), "application/json")},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "parse_error"
        assert client.get("/api/portfolio").json()["portfolio"] == saved.to_dict()

    def test_import_non_object_rejected(self, client):
        response = client.post(
            "/api/portfolio/import",
            files={"file": ("list.json", b"[]", "application/json")},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "format_error"


class TestProjectsApi:
    def test_create_project(self, client, saved):
        response = client.post(
            "/api/portfolio/projects",
            json={"title": "New Thing", "description": "Built it", "tags": "Python, FastAPI"},
        )

        assert response.status_code == 201
        projects = response.json()["portfolio"]["projects"]
        assert len(projects) == 3
        assert projects[-1]["title"] == "New Thing"
        assert projects[-1]["link"] == "#"
        assert projects[-1]["tags"] == ["Python", "FastAPI"]
        assert projects[-1]["id"] not in (1, 2)

    def test_create_project_requires_title(self, client, saved):
        response = client.post("/api/portfolio/projects", json={"title": " ", "description": "x"})

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "title"

    def test_create_project_without_portfolio(self, client):
        response = client.post("/api/portfolio/projects", json={"title": "T", "description": "D"})

        assert response.status_code == 404

    def test_update_project(self, client, saved):
        response = client.patch("/api/portfolio/projects/2", json={"link": "https://new.example.com"})

        assert response.status_code == 200
        projects = response.json()["portfolio"]["projects"]
        assert [p["id"] for p in projects] == [1, 2]
        assert projects[1]["link"] == "https://new.example.com"
        assert projects[1]["title"] == "LocalArt Marketplace"

    def test_update_unknown_project(self, client, saved):
        assert client.patch("/api/portfolio/projects/999", json={"title": "x"}).status_code == 404

    def test_delete_project(self, client, saved):
        response = client.delete("/api/portfolio/projects/1")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["portfolio"]["projects"]] == [2]

    def test_delete_unknown_project_is_noop(self, client, saved):
        response = client.delete("/api/portfolio/projects/999")

        assert response.status_code == 200
        assert response.json()["portfolio"] == saved.to_dict()

    def test_move_project(self, client, saved):
        response = client.post("/api/portfolio/projects/2/move", json={"index": 0})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["portfolio"]["projects"]] == [2, 1]


class TestSkillsApi:
    def test_create_skill(self, client, saved):
        response = client.post("/api/portfolio/skills", json={"name": "Docker", "level": 6})

        assert response.status_code == 201
        skills = response.json()["portfolio"]["skills"]
        assert skills[-1]["name"] == "Docker"
        assert skills[-1]["level"] == 6

    def test_update_skill_level_out_of_range(self, client, saved, gateway, auth_context):
        response = client.patch("/api/portfolio/skills/1", json={"level": 15})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "validation_error"
        assert gateway.load(auth_context, TEST_USER_ID).skills[0].level == 9

    def test_update_skill_level_zero(self, client, saved):
        response = client.patch("/api/portfolio/skills/1", json={"level": 0})

        assert response.status_code == 200
        assert response.json()["portfolio"]["skills"][0]["level"] == 0

    def test_delete_skill(self, client, saved):
        response = client.delete("/api/portfolio/skills/2")

        assert [s["id"] for s in response.json()["portfolio"]["skills"]] == [1]

    def test_move_skill_negative_index_rejected(self, client, saved):
        assert client.post("/api/portfolio/skills/1/move", json={"index": -1}).status_code == 422


class TestOwnerAddressed:
    def test_owner_can_read_and_write(self, client):
        put = client.put(f"/api/users/{TEST_USER_ID}/portfolio", json={"portfolio": {}})
        get = client.get(f"/api/users/{TEST_USER_ID}/portfolio")

        assert put.status_code == 200
        assert get.status_code == 200
        assert get.json()["portfolio"] == PortfolioDocument().to_dict()

    def test_other_user_is_unauthorized(self, client, gateway, store):
        class OtherSession:
            user_id = "someone-else"

        gateway.save(OtherSession(), "someone-else", PortfolioDocument())
        before = store.read("someone-else")

        put = client.put("/api/users/someone-else/portfolio", json={"portfolio": {"skills": []}})
        get = client.get("/api/users/someone-else/portfolio")

        assert put.status_code == 401
        assert get.status_code == 401
        assert store.read("someone-else") == before


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
