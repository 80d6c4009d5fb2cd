"""
Registration, login, bearer tokens and the seed endpoints.
"""


class TestRegister:

    def test_register_returns_user_without_password(self, client, db):
        res = client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "ada@example.com", "password": "secret123"},
        )
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["user"]["email"] == "ada@example.com"
        assert body["user"]["role"] == "user"
        assert "password" not in body["user"]
        assert body["token"]

        stored = db["users"].find_one({"email": "ada@example.com"})
        assert stored["password"] != "secret123"
        assert stored["createdAt"] is not None

    def test_role_in_body_is_ignored(self, client, db):
        res = client.post(
            "/api/auth/register",
            json={"name": "Eve", "email": "eve@example.com", "password": "secret123", "role": "superadmin"},
        )
        assert res.status_code == 201
        assert res.json()["user"]["role"] == "user"
        assert db["users"].find_one({"email": "eve@example.com"})["role"] == "user"

        headers = {"Authorization": f"Bearer {res.json()['token']}"}
        created = client.post(
            "/api/products",
            json={"name": "Jackie 1961", "description": "Hobo bag.", "price": 2950, "category": "women"},
            headers=headers,
        )
        assert created.status_code == 403

    def test_duplicate_email(self, client):
        payload = {"name": "Ada", "email": "ada@example.com", "password": "secret123"}
        client.post("/api/auth/register", json=payload)
        res = client.post("/api/auth/register", json=payload)
        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "User already exists"}

    def test_invalid_body(self, client):
        res = client.post("/api/auth/register", json={"name": "Ada"})
        assert res.status_code == 400
        assert res.json()["success"] is False


class TestLogin:

    def test_login(self, client, user_headers):
        res = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
        assert res.status_code == 200
        assert res.json()["user"]["name"] == "Ada"

    def test_wrong_password(self, client, user_headers):
        res = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid credentials"

    def test_unknown_email(self, client):
        res = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert res.status_code == 401

    def test_me(self, client, user_headers):
        res = client.get("/api/auth/me", headers=user_headers)
        assert res.status_code == 200
        assert res.json()["user"]["email"] == "ada@example.com"

    def test_me_requires_token(self, client):
        res = client.get("/api/auth/me")
        assert res.status_code == 401

    def test_me_rejects_garbage_token(self, client):
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid or expired token"


class TestSeed:

    def test_superadmin_created_once(self, client, db):
        res = client.post("/api/seed")
        assert res.status_code == 201
        body = res.json()
        assert body["credentials"] == {
            "email": "admin@gucci.com",
            "password": "SuperAdmin@2025",
            "role": "superadmin",
        }
        assert db["users"].count_documents({"role": "superadmin"}) == 1

        again = client.post("/api/seed")
        assert again.status_code == 400
        assert again.json()["message"] == "Superadmin already exists"

    def test_seed_products_once(self, client, db):
        res = client.post("/api/seed-products")
        assert res.status_code == 201
        assert res.json()["insertedCount"] == 8
        assert res.json()["message"] == "8 products created successfully"
        assert db["products"].count_documents({"category": "men"}) == 3

        again = client.post("/api/seed-products")
        assert again.status_code == 400
        assert again.json()["message"] == "Products already seeded"


class TestNoDatabase:

    def test_routes_answer_503(self, monkeypatch):
        from fastapi.testclient import TestClient

        import database
        import main

        monkeypatch.setattr(database, "db", None)
        client = TestClient(main.app)
        res = client.get("/api/products")
        assert res.status_code == 503
        assert res.json() == {"success": False, "message": "Database not configured"}

        health = client.get("/test")
        assert health.json()["connection_status"] == "Not Connected"


class TestHealth:

    def test_reports_connected_database(self, client, db):
        db["products"].insert_one({"name": "GG Marmont Leather Belt"})
        body = client.get("/test").json()
        assert body["connection_status"] == "Connected"
        assert body["database_name"] == "gucci-store-test"
        assert body["collections"] == ["products"]

    def test_root_banner(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Gucci Store API"}
