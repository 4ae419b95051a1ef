from __future__ import annotations

import json
from pathlib import Path

import pytest

from super_seed import cli
from super_seed.models import Session

from conftest import FakeGateway, session_payload


@pytest.fixture
def engine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    gateway = FakeGateway()
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))
    monkeypatch.setattr(cli, "gateway_from_config", lambda config: gateway)
    monkeypatch.setattr(cli, "configure_logging", lambda debug, log_dir: None)
    return gateway


def test_parser_accepts_global_debug_and_options() -> None:
    args = cli.build_parser().parse_args(["--debug", "remover", "abc", "--apagar-arquivos", "--sim"])

    assert args.debug
    assert args.command == "remover"
    assert args.apagar_arquivos and args.sim


def test_parser_rejects_unknown_status() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["listar", "--status", "finished"])


@pytest.mark.parametrize(("answer", "expected"), [("s", True), ("Sim", True), ("y", True), ("", False), ("n", False)])
def test_ask(answer: str, expected: bool) -> None:
    assert cli._ask("Confirmar?", reader=lambda prompt: answer) is expected


def test_session_to_dict() -> None:
    session = Session.from_dict(session_payload("abc", "Ubuntu", addedAt="2024-05-01T10:00:00Z"))

    data = cli.session_to_dict(session)

    assert data["id"] == "abc"
    assert data["status"] == "downloading"
    assert data["addedAt"].startswith("2024-05-01T10:00:00")
    json.dumps(data)


def test_listar_json(engine: FakeGateway, capsys: pytest.CaptureFixture[str]) -> None:
    engine.sessions = [
        session_payload("b2", "Debian", status="seeding"),
        session_payload("a1", "Ubuntu", status="paused"),
    ]

    assert cli.main(["listar", "--status", "seeding", "--json"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert [item["name"] for item in output] == ["Debian"]


def test_alternar_by_prefix(engine: FakeGateway, capsys: pytest.CaptureFixture[str]) -> None:
    engine.sessions = [session_payload("abcdef", "Ubuntu", status="paused")]

    assert cli.main(["alternar", "abc"]) == 0

    assert ("resume_session", "abcdef") in engine.calls
    assert "Retomada: Ubuntu" in capsys.readouterr().out


def test_unknown_session_is_an_error(engine: FakeGateway, capsys: pytest.CaptureFixture[str]) -> None:
    engine.sessions = [session_payload("abcdef", "Ubuntu")]

    assert cli.main(["remover", "zzz", "--sim"]) == 1

    assert "Erro:" in capsys.readouterr().err
    assert "remove_session" not in engine.names()


def test_fundos_rejects_invalid_amount(engine: FakeGateway, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["fundos", "-10"]) == 1

    assert "Amount must be a positive whole number" in capsys.readouterr().err
    assert engine.calls == []


def test_publicar_prints_link(engine: FakeGateway, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["publicar", "/data/share", "--preco", "12"]) == 0

    assert capsys.readouterr().out.strip() == engine.link
    assert ("create_publishable", "/data/share", 12) in engine.calls
