import json

import pytest
from typer.testing import CliRunner

from otakutrack.api.client import CatalogClient
from otakutrack.cli import app as cli_app
from otakutrack.exceptions import CatalogError

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_app, "CONFIG_FILE", tmp_path / "config.ini")

    async def offline(self, endpoint, params):
        raise CatalogError("offline")

    monkeypatch.setattr(CatalogClient, "_fetch_json", offline)
    return tmp_path


def invoke(*args):
    return runner.invoke(cli_app.app, list(args))


def test_add_list_and_stats(isolated_config):
    result = invoke(
        "add", "x", "--title", "Show X", "--image", "https://img", "--episodes", "12",
        "--status", "watching", "--rating", "8",
    )
    assert result.exit_code == 0, result.output
    assert "Added" in result.output

    result = invoke("list")
    assert result.exit_code == 0
    assert "Show X" in result.output

    result = invoke("stats")
    assert result.exit_code == 0
    assert "8.0" in result.output

    saved = json.loads((isolated_config / "otakutrack_progress.json").read_text())
    assert saved["x"]["totalEpisodes"] == 12


def test_episode_completes_title(isolated_config):
    invoke("add", "x", "--title", "Show X", "--image", "i", "--episodes", "2", "-s", "watching")
    assert "Updated episode to 1" in invoke("next", "x").output
    result = invoke("next", "x")
    assert "Completed" in result.output

    result = invoke("list", "--status", "completed")
    assert "Show X" in result.output


def test_add_offline_saves_what_was_given(isolated_config):
    result = invoke("add", "jujutsu-kaisen")
    assert result.exit_code == 0
    assert "unavailable" in result.output

    result = invoke("info", "jujutsu-kaisen")
    assert result.exit_code == 0
    assert "Jujutsu Kaisen" in result.output
    assert "No description available." in result.output


def test_search_offline_uses_fallback():
    result = invoke("search", "jujutsu")
    assert result.exit_code == 0
    assert "Jujutsu Kaisen" in result.output


def test_search_rejects_short_query():
    result = invoke("search", "j")
    assert result.exit_code == 1


def test_unknown_ids_are_reported():
    assert invoke("episode", "missing", "3").exit_code == 1
    assert invoke("update", "missing", "--rating", "5").exit_code == 1
    assert invoke("remove", "missing", "--force").exit_code == 1


def test_update_and_remove(isolated_config):
    invoke("add", "x", "--title", "Show X", "--image", "i", "--episodes", "12")
    result = invoke("update", "x", "--current", "4", "--status", "on_hold")
    assert result.exit_code == 0
    assert "updated" in result.output

    saved = json.loads((isolated_config / "otakutrack_progress.json").read_text())
    assert saved["x"]["currentEpisode"] == 4
    assert saved["x"]["status"] == "on_hold"

    assert invoke("remove", "x", "--force").exit_code == 0
    assert "No anime in your list yet" in invoke("list").output


def test_list_rejects_unknown_status():
    assert invoke("list", "--status", "binging").exit_code == 1


def test_upcoming(isolated_config):
    invoke("add", "x", "--title", "Show X", "--image", "i", "--episodes", "12",
           "--current", "3", "-s", "watching")
    result = invoke("upcoming")
    assert "Show X" in result.output
    assert "4" in result.output


def test_config_reset_writes_file(isolated_config):
    result = invoke("config", "--reset")
    assert result.exit_code == 0
    assert (isolated_config / "config.ini").is_file()
    assert "cache_ttl_seconds" in result.output


def test_version():
    result = invoke("--version")
    assert result.exit_code == 0
    assert "otakutrack" in result.output
