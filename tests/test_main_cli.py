import json

from main import _parse_args, main


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_config_option_precedes_implicit_serve() -> None:
    args = _parse_args(["--config", "custom.yaml", "--port", "8080"])
    assert args.command == "serve"
    assert args.config == "custom.yaml"
    assert args.port == 8080


def test_users_subcommand_available() -> None:
    args = _parse_args(["users"])
    assert args.command == "users"


def test_init_db_creates_users_file(tmp_path, monkeypatch, capsys) -> None:
    users_file = tmp_path / "database" / "users.json"
    monkeypatch.setenv("DCNEXUS_USERS_PATH", str(users_file))
    monkeypatch.setenv("DCNEXUS_CONFIG", str(tmp_path / "absent.yaml"))

    assert main(["init-db"]) == 0

    assert json.loads(users_file.read_text(encoding="utf-8")) == []
    assert "initialised" in capsys.readouterr().out


def test_users_listing_omits_passwords(tmp_path, monkeypatch, capsys) -> None:
    users_file = tmp_path / "users.json"
    users_file.write_text(
        json.dumps(
            [
                {
                    "id": 1714566600000,
                    "fullName": "Ana Lopez",
                    "email": "ana@test.com",
                    "password": "secret1",
                    "createdAt": "2024-05-01T12:30:00+00:00",
                }
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("DCNEXUS_USERS_PATH", str(users_file))
    monkeypatch.setenv("DCNEXUS_CONFIG", str(tmp_path / "absent.yaml"))

    assert main(["users"]) == 0

    output = capsys.readouterr().out
    assert "Ana Lopez" in output
    assert "ana@test.com" in output
    assert "secret1" not in output


def test_corrupt_users_file_exits_non_zero(tmp_path, monkeypatch) -> None:
    users_file = tmp_path / "users.json"
    users_file.write_text("not json", encoding="utf-8")
    monkeypatch.setenv("DCNEXUS_USERS_PATH", str(users_file))
    monkeypatch.setenv("DCNEXUS_CONFIG", str(tmp_path / "absent.yaml"))

    assert main(["users"]) == 1
