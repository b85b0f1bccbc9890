"""Heuristic scorer unit tests."""

import itertools

import pytest

from marketpulse.models import Confidence, EngineeredFeatures
from marketpulse.scoring.scorer import HeuristicScorer, confidence_for, score_features


@pytest.mark.parametrize(
    "count_7d,count_24h,expected",
    [
        (20, 5, Confidence.HIGH),
        (40, 10, Confidence.HIGH),
        (20, 4, Confidence.MED),
        (5, 0, Confidence.MED),
        (19, 19, Confidence.MED),
        (4, 4, Confidence.LOW),
        (0, 0, Confidence.LOW),
    ],
)
def test_confidence_tiers(count_7d, count_24h, expected):
    f = EngineeredFeatures(snapshots_count_7d=count_7d, snapshots_count_24h=count_24h)
    assert confidence_for(f) == expected


def test_no_triggers_is_insufficient_data():
    result = score_features(EngineeredFeatures())
    assert result.explanation == "insufficient data"
    assert result.confidence == Confidence.LOW
    assert result.score == 45


def test_neutral_med_confidence_stays_at_50():
    result = score_features(EngineeredFeatures(current_probability=0.5, snapshots_count_7d=10))
    assert result.score == 50
    assert result.confidence == Confidence.MED


def test_bullish_features():
    f = EngineeredFeatures(
        current_probability=0.8,
        chg_24h=0.12,
        vol_24h=0.01,
        snapshots_count_7d=30,
        snapshots_count_24h=8,
    )
    result = score_features(f)
    assert result.score == 50 + 10 + 5 + 5
    assert result.explanation == "high probability; 24h chg 12.0%"


def test_bearish_features():
    f = EngineeredFeatures(
        current_probability=0.1,
        chg_24h=-0.2,
        vol_24h=0.08,
        reversal_risk=0.9,
    )
    result = score_features(f)
    assert result.score == 50 - 10 - 5 - 5 - 10 - 5
    assert result.explanation == "low probability; 24h chg -20.0%; high volatility; elevated reversal risk"


def test_thresholds_are_strict():
    f = EngineeredFeatures(
        current_probability=0.7,
        chg_24h=0.05,
        vol_24h=0.05,
        reversal_risk=0.5,
        snapshots_count_7d=5,
    )
    result = score_features(f)
    assert result.score == 50
    assert result.explanation == "insufficient data"


def test_score_always_in_range():
    probs = [None, 0.0, 0.2, 0.5, 0.9, 1.0]
    changes = [None, -1.0, -0.06, 0.0, 0.06, 1.0]
    vols = [None, 0.0, 0.5]
    risks = [0.0, 0.6, 1.0]
    counts = [(0, 0), (5, 1), (25, 6)]
    for p, chg, vol, risk, (c7, c24) in itertools.product(probs, changes, vols, risks, counts):
        f = EngineeredFeatures(
            current_probability=p,
            chg_24h=chg,
            vol_24h=vol,
            reversal_risk=risk,
            snapshots_count_7d=c7,
            snapshots_count_24h=c24,
        )
        assert 0 <= score_features(f).score <= 100


def test_heuristic_scorer_delegates():
    f = EngineeredFeatures(current_probability=0.9)
    assert HeuristicScorer().score_features(f) == score_features(f)
