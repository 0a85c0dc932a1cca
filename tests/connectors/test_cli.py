import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from stravadash.connectors.strava import __main__ as cli
from stravadash.connectors.strava.client import ActivityBatch
from stravadash.services.dashboard import aggregate

RAW = [
    {"type": "Ride", "distance": 30000, "total_elevation_gain": 300, "moving_time": 3600, "start_date": "2024-01-03"},
    {"type": "Run", "distance": 10000, "total_elevation_gain": 100, "moving_time": 3600, "start_date": "2024-01-02"},
    {"type": "Run", "distance": 5000, "total_elevation_gain": 50, "moving_time": 1800, "start_date": "2024-01-01"},
    {"type": "Workout", "distance": 0, "total_elevation_gain": 0, "moving_time": 0, "start_date": "2024-01-01"},
]


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("STRAVA_CLIENT_ID", "42")
    monkeypatch.setenv("STRAVA_CLIENT_SECRET", "secret")
    monkeypatch.setenv("STRAVA_REFRESH_TOKEN", "ref")
    monkeypatch.setenv("STRAVA_TOKEN_FILE", str(tmp_path / "tokens.json"))
    return tmp_path


@pytest.fixture
def fake_cache():
    cache = MagicMock()
    cache.is_valid.return_value = False
    cache.has_refresh_token = True
    cache.get_valid_token.return_value = "tok"
    return cache


def batch():
    return ActivityBatch(activities=RAW, fetched_at=datetime.now(timezone.utc))


def test_format_table():
    table = cli.format_table(aggregate(RAW))
    lines = table.splitlines()
    assert lines[0].startswith("Sport")
    assert "Run" in lines[2]
    assert "15.00 km" in lines[2]
    assert "N/A" in next(line for line in lines if line.startswith("Workout"))


def test_main_prints_json(env, fake_cache, capsys):
    with patch.object(cli, "build_token_cache", return_value=fake_cache), patch.object(
        cli, "fetch_activities", return_value=batch()
    ) as fetch:
        cli.main(["--format", "json", "--env", str(env / "missing.env")])

    fetch.assert_called_once()
    assert fetch.call_args.args[0] == "tok"
    printed = json.loads(capsys.readouterr().out)
    assert [s["sport"] for s in printed] == ["Run", "Ride", "Workout"]
    assert printed[2]["average_speed_km_h"] is None


def test_main_dumps_csv_and_raw(env, fake_cache):
    out_dir = env / "out"
    with patch.object(cli, "build_token_cache", return_value=fake_cache), patch.object(
        cli, "fetch_activities", return_value=batch()
    ):
        cli.main(["--format", "csv", "--raw", "--output-dir", str(out_dir), "--env", str(env / "missing.env")])

    csv_files = list(out_dir.glob("*_strava_sport_summaries.csv"))
    raw_files = list(out_dir.glob("*_strava_activities.jsonl"))
    assert len(csv_files) == 1
    assert len(raw_files) == 1
    assert len(raw_files[0].read_text().splitlines()) == len(RAW)
    assert csv_files[0].read_text().splitlines()[0].startswith("sport,")


def test_main_exchanges_code(env, fake_cache):
    with patch.object(cli, "build_token_cache", return_value=fake_cache), patch.object(
        cli, "fetch_activities"
    ) as fetch:
        cli.main(["--code", " abc ", "--env", str(env / "missing.env")])
    fake_cache.bootstrap_from_code.assert_called_once_with("abc")
    fetch.assert_not_called()


def test_main_prints_auth_url(env, capsys):
    cli.main(["--auth-url", "--env", str(env / "missing.env")])
    assert capsys.readouterr().out.startswith("https://www.strava.com/oauth/authorize?")


def test_main_without_tokens_exits_with_error(env, fake_cache):
    fake_cache.has_refresh_token = False
    with patch.object(cli, "build_token_cache", return_value=fake_cache):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--env", str(env / "missing.env")])
    assert exc.value.code == 1


@pytest.mark.parametrize("flag, expected", [("true", "DEBUG"), ("0", "INFO")])
def test_debug_env_flag_sets_log_level(env, monkeypatch, flag, expected):
    monkeypatch.setenv("DEBUG", flag)
    with patch.object(cli, "setup_logging") as setup:
        cli.main(["--auth-url", "--env", str(env / "missing.env")])
    assert setup.call_args_list[-1].args[0] == expected
