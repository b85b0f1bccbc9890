"""Scoring runner: cooldown gate, active filter, per-market error isolation."""

from structlog.testing import capture_logs

from conftest import HOUR, NOW
from marketpulse.features.engine import FeatureEngine
from marketpulse.models import ErrorScope
from marketpulse.scoring.runner import ScoringManager

MINUTE = 60 * 1000


def test_second_immediate_pass_is_cooled_down(repo):
    for name in ("a", "b", "c"):
        m = repo.add_market(name)
        repo.add_snapshot(m.id, NOW - HOUR, probability=0.5)
    manager = ScoringManager(repo)

    first = manager.score_all_markets(now=NOW)
    assert first.markets_scored == 3
    assert first.success is True
    assert first.errors == []

    second = manager.score_all_markets(now=NOW + MINUTE)
    assert second.markets_scored == 0
    assert second.markets_skipped == 3
    assert second.success is False
    assert len(repo.signals) == 3


def test_market_becomes_eligible_after_cooldown(repo):
    m = repo.add_market("a")
    repo.add_snapshot(m.id, NOW, probability=0.5)
    manager = ScoringManager(repo, cooldown_sec=600)
    assert manager.score_all_markets(now=NOW).markets_scored == 1
    assert manager.score_all_markets(now=NOW + 9 * MINUTE).markets_scored == 0
    assert manager.score_all_markets(now=NOW + 11 * MINUTE).markets_scored == 1
    assert len(repo.signals) == 2


def test_active_only_scores_active_markets(repo):
    active = repo.add_market("live", status="active")
    repo.add_market("done", status="closed")
    repo.add_market("paused", status="inactive")
    result = ScoringManager(repo).score_all_markets(active_only=True, now=NOW)
    assert result.markets_scored == 1
    assert {s.market_id for s in repo.signals} == {active.id}


def test_all_markets_when_not_active_only(repo):
    repo.add_market("live", status="active")
    repo.add_market("done", status="closed")
    result = ScoringManager(repo).score_all_markets(active_only=False, now=NOW)
    assert result.markets_scored == 2


def test_signal_carries_score_and_features(repo):
    m = repo.add_market("a")
    repo.add_snapshot(m.id, NOW, probability=0.9)
    ScoringManager(repo).score_all_markets(now=NOW)
    (signal,) = repo.signals
    assert signal.ts == NOW
    assert signal.market_id == m.id
    assert signal.features["current_probability"] == 0.9
    assert signal.explanation == "high probability"
    assert signal.score == 55


def test_market_without_snapshots_still_gets_default_signal(repo):
    repo.add_market("bare")
    result = ScoringManager(repo).score_all_markets(now=NOW)
    assert result.markets_scored == 1
    assert repo.signals[0].score == 50
    assert repo.signals[0].features["reversal_risk"] == 0.5


def test_failure_is_recorded_and_loop_continues(repo):
    good = repo.add_market("good")
    bad = repo.add_market("bad")

    class FlakyEngine(FeatureEngine):
        def compute_features(self, market_id, now=None):
            if market_id == bad.id:
                raise RuntimeError("boom")
            return super().compute_features(market_id, now=now)

    result = ScoringManager(repo, engine=FlakyEngine(repo)).score_all_markets(now=NOW)
    assert result.markets_scored == 1
    assert result.success is True
    (err,) = result.errors
    assert err.scope == ErrorScope.SCORING
    assert err.key == bad.id
    assert str(err) == f"{bad.id}: boom"
    assert [s.market_id for s in repo.signals] == [good.id]


def test_no_markets_is_not_success(repo):
    result = ScoringManager(repo).score_all_markets(now=NOW)
    assert result.to_dict() == {"success": False, "marketsScored": 0, "errors": []}


def test_cooldown_skip_is_logged_per_market(repo):
    m = repo.add_market("a")
    repo.add_snapshot(m.id, NOW, probability=0.5)
    manager = ScoringManager(repo)
    manager.score_all_markets(now=NOW)
    with capture_logs() as logs:
        manager.score_all_markets(now=NOW + MINUTE)
    skipped = [e for e in logs if e["event"] == "scoring_skipped_cooldown"]
    assert skipped == [{"event": "scoring_skipped_cooldown", "market_id": m.id, "log_level": "debug"}]
