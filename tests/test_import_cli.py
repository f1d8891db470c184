import sys
from pathlib import Path

import pytest

from ttclub.utils.supa import SupabaseConnectionError

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

import import_ics  # noqa: E402

CALENDAR = "\n".join(
    [
        "BEGIN:VCALENDAR",
        "BEGIN:VEVENT",
        "UID:cli-1",
        "SUMMARY:Damen I gegen TSV West",
        "DTSTART:20241102T140000",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
)


@pytest.fixture
def calendar_file(tmp_path):
    path = tmp_path / "damen.ics"
    path.write_text(CALENDAR, encoding="utf-8")
    return path


def test_cli_imports_file(calendar_file, capsys):
    assert import_ics.main([str(calendar_file)]) == 0

    out = capsys.readouterr().out
    assert "damen.ics: 1 neue Spiele, 0 bereits vorhanden (Damen I)" in out
    assert "02.11.2024 14:00" in out
    assert "TSV West" in out


def test_cli_team_override(calendar_file, capsys):
    assert import_ics.main([str(calendar_file), "--team", "Damen II"]) == 0

    assert "(Damen II)" in capsys.readouterr().out


def test_cli_without_events(tmp_path, capsys):
    empty = tmp_path / "leer.ics"
    empty.write_text("BEGIN:VCALENDAR\nEND:VCALENDAR", encoding="utf-8")

    assert import_ics.main([str(empty), str(tmp_path / "fehlt.ics")]) == 1
    assert "leer.ics: keine gültigen Termine gefunden" in capsys.readouterr().out


def test_cli_push_needs_credentials(calendar_file, monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

    assert import_ics.main([str(calendar_file), "--push"]) == 1


def test_cli_push_inserts_matches(calendar_file, monkeypatch, fake_client_factory, capsys):
    client = fake_client_factory()
    monkeypatch.setattr(import_ics, "get_service_client", lambda: client)

    assert import_ics.main([str(calendar_file), "--push"]) == 0

    assert client.queries[0].table == "matches"
    assert "1 Spiele wurden in den Spielplan übernommen." in capsys.readouterr().out


def test_cli_push_reports_unreachable_backend(calendar_file, monkeypatch, caplog):
    def _offline():
        raise SupabaseConnectionError("Supabase is not reachable right now.")

    monkeypatch.setattr(import_ics, "get_service_client", _offline)

    with caplog.at_level("ERROR", logger="ttclub.import_ics"):
        assert import_ics.main([str(calendar_file), "--push"]) == 1
    assert "not reachable" in caplog.text
