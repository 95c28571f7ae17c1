"""End-to-end tests of the HTTP surface against the in-memory database."""

import pytest
from fastapi.testclient import TestClient

from formation_api.api.deps import get_token_service
from formation_api.main import app

PASSWORD = "Passw0rd@x"


@pytest.fixture
def client(fake_db):
    # No context manager: the lifespan (real MongoDB) is not started
    app.state.db = fake_db
    return TestClient(app)


def register(client, email="alice@example.com", password=PASSWORD, name="Alice"):
    return client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": name},
    )


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client):
        response = client.get("/health")

        assert response.json()["database"] == "connected"


class TestAuth:
    def test_register(self, client):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "SUCCESS"
        assert body["message"] == "User registered successfully"
        assert get_token_service().extract_subject(body["data"]["token"]) == "alice@example.com"

    def test_register_duplicate(self, client):
        register(client)

        response = register(client)

        assert response.status_code == 409
        assert response.json()["status"] == "FAILURE"
        assert response.json()["message"] == "You already have an account"

    def test_register_validation(self, client):
        response = register(client, email="not-an-email", password="short", name="A1")

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert len(body["errors"]) == 3

    def test_login(self, client):
        register(client)

        response = client.post(
            "/api/v1/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "User logged in successfully"
        assert response.json()["data"]["token"]

    def test_login_wrong_password(self, client):
        register(client)

        response = client.post(
            "/api/v1/auth/login", json={"email": "alice@example.com", "password": "Wr0ngPass@"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email or password"

    def test_login_unknown_email(self, client):
        response = client.post(
            "/api/v1/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )

        assert response.status_code == 404


class TestUsers:
    def test_protected_route_requires_token(self, client):
        response = client.get("/api/protected/getUserInfo")

        assert response.status_code == 401
        assert response.json()["message"] == "No Authorization token or invalid format"

    def test_get_user_info(self, client):
        token = register(client).json()["data"]["token"]

        response = client.get("/api/protected/getUserInfo", headers=auth_headers(token))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["name"] == "Alice"
        assert data["profilePicture"].endswith("/images/defaultProfilePicture.png")
        assert "password" not in data

    def test_verify_user(self, client):
        token = register(client).json()["data"]["token"]

        response = client.get("/api/protected/verifyUser", headers=auth_headers(token))

        assert response.json()["data"] == {"success": True}

    def test_presence_round_trip(self, client):
        token = register(client).json()["data"]["token"]
        headers = auth_headers(token)
        user_id = client.get("/api/protected/getUserInfo", headers=headers).json()["data"]["_id"]

        online = client.put(
            "/api/protected/userStatus", json={"userId": user_id}, headers=headers
        )
        connected = client.get("/api/users").json()["data"]
        offline = client.post("/api/protected/disconnect", headers=headers)

        assert online.status_code == 200
        assert online.json()["data"]["userStatus"] == "ONLINE"
        assert [u["email"] for u in connected] == ["alice@example.com"]
        assert "password" not in connected[0]
        assert offline.json()["data"]["userStatus"] == "OFFLINE"
        assert client.get("/api/users").json()["data"] == []

    def test_user_status_unknown_user(self, client):
        token = register(client).json()["data"]["token"]

        response = client.put(
            "/api/protected/userStatus",
            json={"userId": "000000000000000000000000"},
            headers=auth_headers(token),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "incorrect userid"

    def test_get_user_info_by_unknown_id(self, client):
        token = register(client).json()["data"]["token"]

        response = client.get(
            "/api/protected/getUserInfo/000000000000000000000000", headers=auth_headers(token)
        )

        assert response.status_code == 404


class TestFormations:
    def test_all_paged(self, client):
        response = client.get("/api/formations/all", params={"page": 0, "size": 4})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalElements"] == 6
        assert data["totalPages"] == 2
        assert data["number"] == 0
        assert data["size"] == 4
        assert len(data["content"]) == 4
        assert "id" in data["content"][0]

    def test_default_page_size(self, client):
        data = client.get("/api/formations/all").json()["data"]

        assert data["size"] == 10
        assert data["number"] == 0

    def test_invalid_page_size(self, client):
        response = client.get("/api/formations/all", params={"size": 0})

        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    def test_advanced_search(self, client):
        response = client.get(
            "/api/formations/advancedSearch",
            params={
                "region": "Île-de-France",
                "program": "CPGE",
                "bacType": "general",
                "sortBy": "candidateCount",
                "direction": "DESC",
            },
        )

        data = response.json()["data"]
        assert data["totalElements"] == 2
        assert [f["establishmentName"] for f in data["content"]] == [
            "Lycée Louis-le-Grand",
            "Lycée Henri IV",
        ]

    def test_advanced_search_boolean(self, client):
        response = client.get(
            "/api/formations/advancedSearch", params={"hasDetailedInfo": "false"}
        )

        assert response.json()["data"]["totalElements"] == 3

    def test_rank(self, client):
        response = client.get(
            "/api/formations/rank", params={"sortBy": "candidateCount", "size": 1}
        )

        data = response.json()["data"]
        assert data["content"][0]["establishmentName"] == "Lycée Louis-le-Grand"
        assert data["totalPages"] == 6

    def test_search_by_region(self, client):
        response = client.get("/api/formations/search/region", params={"value": "Occitanie"})

        content = response.json()["data"]["content"]
        assert [f["establishmentName"] for f in content] == ["Institut Privé de Toulouse"]

    def test_search_by_name(self, client):
        response = client.get("/api/formations/search", params={"query": "iut"})

        assert [f["establishmentName"] for f in response.json()["data"]] == ["IUT Lyon 1"]

    def test_suggestions(self, client):
        response = client.get(
            "/api/formations/suggestions", params={"field": "region", "query": "ile"}
        )

        assert response.json()["data"] == ["Île-de-France"]

    def test_get_by_id(self, client):
        first = client.get("/api/formations/all", params={"size": 1}).json()["data"]["content"][0]

        response = client.get(f"/api/formations/{first['id']}")

        assert response.status_code == 200
        assert response.json()["data"] == first

    def test_get_by_unknown_id(self, client):
        response = client.get("/api/formations/000000000000000000000000")

        assert response.status_code == 404
        assert response.json()["status"] == "FAILURE"

    def test_suggestions_default_to_five_values(self, client, fake_db, collection_factory):
        fake_db.collections["formations"] = collection_factory(
            [{"region": f"Region {i}"} for i in range(8)] + [{"region": ""}]
        )

        response = client.get("/api/formations/suggestions", params={"field": "region"})

        assert response.json()["data"] == [f"Region {i}" for i in range(5)]
