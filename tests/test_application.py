from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from dcnexus import create_app
from dcnexus.config import Settings


def test_serves_front_end_and_api_together(tmp_path: Path) -> None:
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>DC Nexus</h1>", encoding="utf-8")
    (public / "login.html").write_text("<form id=\"loginForm\"></form>", encoding="utf-8")

    settings = Settings(users_path=tmp_path / "database" / "users.json", static_dir=public)
    app = create_app(settings=settings)

    with TestClient(app) as client:
        assert "DC Nexus" in client.get("/").text
        assert "loginForm" in client.get("/login.html").text
        assert client.get("/health").json()["ok"] is True

        registered = client.post(
            "/api/register",
            json={"fullName": "Ana Lopez", "email": "ana@test.com", "password": "secret1"},
        )
        assert registered.status_code == 201

    assert settings.users_path.exists()


def test_missing_static_directory_serves_api_only(tmp_path: Path) -> None:
    settings = Settings(users_path=tmp_path / "users.json", static_dir=tmp_path / "missing")
    app = create_app(settings=settings)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/index.html").status_code == 404

    # The users file is created eagerly at startup.
    assert settings.users_path.read_text(encoding="utf-8") == "[]"
