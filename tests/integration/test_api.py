from app.core.middleware import RATE_LIMIT_MESSAGE
from app.core.security import create_access_token
from app.main import rate_limiter
from app.services.engine import CodeEngine
from app.services.providers import Provider


SIGNUP = {"email": "ada@example.com", "password": "secret123", "name": "Ada"}
TOO_LONG = "x" * 10_001


class TestSignup:
    def test_created(self, client):
        response = client.post("/api/auth/signup", json=SIGNUP)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "ada@example.com"
        assert body["data"]["user"]["name"] == "Ada"
        assert body["data"]["token"]

    def test_duplicate_email_conflicts(self, client):
        client.post("/api/auth/signup", json=SIGNUP)
        response = client.post("/api/auth/signup", json=SIGNUP)
        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "User already exists with this email"}

    def test_missing_fields(self, client):
        response = client.post("/api/auth/signup", json={"email": "ada@example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"

    def test_invalid_email(self, client):
        response = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "secret123"})
        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid email address"

    def test_short_password(self, client):
        response = client.post("/api/auth/signup", json={"email": "ada@example.com", "password": "12345"})
        assert response.status_code == 400

    def test_password_over_72_bytes(self, client):
        response = client.post("/api/auth/signup", json={"email": "ada@example.com", "password": "é" * 40})
        assert response.status_code == 400

    def test_malformed_body(self, client):
        response = client.post(
            "/api/auth/signup", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestLogin:
    def test_success(self, client):
        client.post("/api/auth/signup", json=SIGNUP)
        response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "ada@example.com"

    def test_failures_are_indistinguishable(self, client):
        client.post("/api/auth/signup", json=SIGNUP)
        wrong = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong-pass"})
        unknown = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "secret123"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()

    def test_missing_fields(self, client):
        assert client.post("/api/auth/login", json={}).status_code == 400


class TestAuthGate:
    def test_me(self, client, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["user"] == {"id": 1, "email": "ada@example.com", "name": "Ada"}

    def test_verify(self, client, auth_headers):
        response = client.post("/api/auth/verify", headers=auth_headers)
        assert response.json()["message"] == "Token is valid"

    def test_missing_header(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "No token provided, authorization denied"

    def test_wrong_scheme(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert response.json()["message"] == "Invalid token format"

    def test_bad_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid"

    def test_user_no_longer_exists(self, client):
        headers = {"Authorization": f"Bearer {create_access_token(999)}"}
        response = client.get("/api/auth/me", headers=headers)
        assert response.json()["message"] == "Token is not valid - user not found"

    def test_list_users_in_development(self, client, auth_headers):
        response = client.get("/api/auth/users")
        assert response.status_code == 200
        assert response.json()["data"][0]["sessionsCount"] == 0


class TestCodeOperations:
    def test_analyze_without_keys(self, client):
        response = client.post("/api/analyze", json={"code": "print('hi')", "language": "Python"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert response.json()["success"] is True
        assert data["language"] == "Python"
        assert data["resultKind"] == "fallback"
        assert any("print" in entry["line"] for entry in data["lineByLineAnalysis"])

    def test_debug_flags_var(self, client):
        response = client.post("/api/debug", json={"code": "var x = 1;", "language": "JavaScript"})
        issues = response.json()["data"]["issues"]
        assert any(i["type"] == "syntax" and "var" in i["description"] for i in issues)

    def test_translate(self, client):
        response = client.post(
            "/api/translate",
            json={"code": "let x = 1;", "language": "JavaScript", "targetLanguage": "Python"},
        )
        data = response.json()["data"]
        assert data["language"] == "Python"
        assert data["requestedTargetLanguage"] == "Python"
        assert "x = 1" in data["translatedCode"]

    def test_translate_requires_target(self, client):
        response = client.post("/api/translate", json={"code": "let x = 1;", "language": "JavaScript"})
        assert response.status_code == 400
        assert response.json()["message"] == "Code, source language, and target language are required"

    def test_missing_language(self, client):
        response = client.post("/api/analyze", json={"code": "x"})
        assert response.status_code == 400
        assert response.json()["message"] == "Code and language are required"

    def test_code_too_long(self, client, override_engine):
        calls = []

        class RecordingProvider(Provider):
            available = True

            def __init__(self, name):
                self.name = name

            async def analyze(self, code, language):
                calls.append((self.name, "analyze"))

            async def debug(self, code, language):
                calls.append((self.name, "debug"))

            async def translate(self, code, language):
                calls.append((self.name, "translate"))

        providers = {name: RecordingProvider(name) for name in ("openai", "gemini", "huggingface")}
        override_engine(CodeEngine(providers, heuristic=RecordingProvider("heuristic")))
        payloads = {
            "/api/analyze": {"code": TOO_LONG, "language": "Python"},
            "/api/debug": {"code": TOO_LONG, "language": "Python"},
            "/api/translate": {"code": TOO_LONG, "language": "Java", "targetLanguage": "Python"},
        }
        for path, payload in payloads.items():
            response = client.post(path, json=payload)
            assert response.status_code == 400
            assert response.json()["message"] == "Code is too long. Maximum 10,000 characters allowed."
        assert calls == []

    def test_live_provider_result(self, client, override_engine):
        class StubOpenAI(Provider):
            name = "openai"
            available = True

            async def analyze(self, code, language):
                return {"language": "Python", "overview": "live", "lineByLineAnalysis": []}

        override_engine(CodeEngine({"openai": StubOpenAI()}))
        data = client.post("/api/analyze", json={"code": "x = 1", "language": "Python"}).json()["data"]
        assert data["resultKind"] == "live"
        assert data["provider"] == "openai"
        assert data["overview"] == "live"


class TestHistory:
    def test_only_authenticated_calls_recorded(self, client, auth_headers):
        client.post("/api/analyze", json={"code": "print(1)", "language": "Python"})
        client.post("/api/debug", json={"code": "print(2)", "language": "Python"}, headers=auth_headers)

        response = client.get("/api/history", headers=auth_headers)
        history = response.json()["data"]
        assert len(history) == 1
        assert history[0]["type"] == "debug"
        assert history[0]["code"] == "print(2)"
        assert history[0]["result"]["resultKind"] == "fallback"

    def test_translate_records_target(self, client, auth_headers):
        client.post(
            "/api/translate",
            json={"code": "let x = 1;", "language": "JavaScript", "targetLanguage": "Go"},
            headers=auth_headers,
        )
        entry = client.get("/api/history", headers=auth_headers).json()["data"][0]
        assert entry["targetLanguage"] == "Go"

    def test_history_is_bounded(self, client, store, auth_headers):
        for i in range(store.history_limit + 2):
            client.post("/api/analyze", json={"code": f"print({i})", "language": "Python"}, headers=auth_headers)
        history = client.get("/api/history", headers=auth_headers).json()["data"]
        assert len(history) == store.history_limit
        assert history[-1]["code"] == f"print({store.history_limit + 1})"

    def test_requires_token(self, client):
        assert client.get("/api/history").status_code == 401

    def test_invalid_token_is_anonymous_for_code_routes(self, client):
        response = client.post(
            "/api/analyze",
            json={"code": "print(1)", "language": "Python"},
            headers={"Authorization": "Bearer garbage"},
        )
        assert response.status_code == 200


class TestMeta:
    def test_languages(self, client):
        data = client.get("/api/languages").json()["data"]
        assert "Python" in data
        assert "JavaScript" in data

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["success"] is True
        assert body["openaiConfigured"] is False
        assert body["geminiConfigured"] is False
        assert body["huggingFaceConfigured"] is False
        assert "timestamp" in body

    def test_unknown_route(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_handlers_documented(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert paths["/api/analyze"]["post"]["description"] == "Explain code line by line and predict its output."
        assert paths["/api/auth/me"]["get"]["description"] == "The user the bearer token belongs to."
        for operations in paths.values():
            for operation in operations.values():
                assert operation.get("description")


class TestRateLimit:
    def test_api_requests_limited_per_client(self, client, monkeypatch):
        monkeypatch.setattr(rate_limiter, "limit", 2)
        first = client.get("/api/languages")
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        client.get("/api/languages")

        response = client.get("/api/languages")
        assert response.status_code == 429
        assert response.json() == {"success": False, "message": RATE_LIMIT_MESSAGE}
        assert int(response.headers["Retry-After"]) > 0

    def test_other_routes_not_limited(self, client, monkeypatch):
        monkeypatch.setattr(rate_limiter, "limit", 1)
        for _ in range(3):
            assert client.get("/openapi.json").status_code == 200


class TestSecurityHeaders:
    def test_present_on_responses(self, client):
        for response in (client.get("/api/health"), client.get("/api/nope")):
            assert response.headers["X-Content-Type-Options"] == "nosniff"
            assert response.headers["X-Frame-Options"] == "DENY"
            assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
