"""TOML config loading and profile overlay."""

from marketpulse.config import get_settings, load_config
from marketpulse.config.settings import Settings


def test_defaults_without_config():
    s = Settings.from_dict({})
    assert s.db_path == "data/marketpulse.duckdb"
    assert s.limit_per_source == 100
    assert s.signal_cooldown_sec == 600
    assert s.score_active_only is True
    assert s.polymarket_page_size == 50
    assert s.kalshi_page_size == 200
    assert s.logging_level == "INFO"


def test_profile_overlay_deep_merges(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[storage]\ndb_path = "a.duckdb"\n[scoring]\ncooldown_sec = 600\nactive_only = true\n'
    )
    (tmp_path / "test.toml").write_text("[scoring]\ncooldown_sec = 60\n")
    raw = load_config("test", tmp_path)
    assert raw["scoring"] == {"cooldown_sec": 60, "active_only": True}
    s = get_settings("test", tmp_path)
    assert s.db_path == "a.duckdb"
    assert s.signal_cooldown_sec == 60


def test_missing_default_file_gives_empty_config(tmp_path):
    assert load_config(None, tmp_path) == {}
