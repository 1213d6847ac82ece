"""Unit tests for trust score aggregation."""

import os
import time
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from src.engines.trust.aggregator import ScoreAggregator, Trend, scoring_cutoffs, trend_for
from src.engines.trust.policy import SCORE_POLICY, ScorePolicy

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
END_OF_TODAY, END_OF_YESTERDAY = scoring_cutoffs(NOW)
TODAY = END_OF_TODAY - timedelta(minutes=1)
YESTERDAY = END_OF_YESTERDAY - timedelta(hours=1)
TOMORROW = END_OF_TODAY + timedelta(hours=1)


@pytest.fixture
def central_european_time():
    """Switch the process-local timezone to CET/CEST for one test."""
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "CET-1CEST,M3.5.0,M10.5.0/3"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()


class TestScoringCutoffs:
    """Day boundaries."""

    def test_cutoffs_end_consecutive_days(self):
        assert END_OF_TODAY.date() - END_OF_YESTERDAY.date() == timedelta(days=1)
        for cutoff in (END_OF_TODAY, END_OF_YESTERDAY):
            assert (cutoff.hour, cutoff.minute, cutoff.second, cutoff.microsecond) == (23, 59, 59, 999000)

    def test_now_is_inside_today(self):
        assert END_OF_YESTERDAY < NOW <= END_OF_TODAY

    def test_cutoffs_are_aware(self):
        assert END_OF_TODAY.tzinfo is not None

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
    def test_cutoffs_follow_wall_clock_across_dst(self, central_european_time):
        # Clocks go back one hour on 2026-10-25 in this zone
        end_of_today, end_of_yesterday = scoring_cutoffs(datetime(2026, 10, 25, 12, 0, tzinfo=timezone.utc))

        assert end_of_today.utcoffset() == timedelta(hours=1)
        assert end_of_yesterday.utcoffset() == timedelta(hours=2)
        assert (end_of_yesterday.day, end_of_yesterday.hour) == (24, 23)
        assert end_of_today - end_of_yesterday == timedelta(hours=25)


class TestUnboundedScores:
    """Raw point totals for project views."""

    def test_sums_points_per_user(self, entry_factory):
        ada, grace = uuid.uuid4(), uuid.uuid4()
        entries = [
            entry_factory(ada, 3, action_date=TODAY),
            entry_factory(ada, 2, action_date=YESTERDAY),
            entry_factory(grace, -1, action_date=YESTERDAY),
        ]

        scores = ScoreAggregator.unbounded(entries, NOW)

        assert scores[ada].score == 5
        assert scores[ada].previous_score == 2
        assert scores[ada].trend == Trend.UP
        assert scores[grace].score == -1
        assert scores[grace].previous_score == -1
        assert scores[grace].trend == Trend.STABLE

    def test_negative_today_trends_down(self, entry_factory):
        user = uuid.uuid4()
        entries = [
            entry_factory(user, 2, action_date=YESTERDAY),
            entry_factory(user, -1, action_date=TODAY),
        ]

        score = ScoreAggregator.unbounded(entries, NOW)[user]

        assert (score.score, score.previous_score, score.trend) == (1, 2, Trend.DOWN)

    def test_future_entries_do_not_count(self, entry_factory):
        user = uuid.uuid4()
        entries = [
            entry_factory(user, 3, action_date=TODAY),
            entry_factory(user, 10, action_date=TOMORROW),
        ]

        assert ScoreAggregator.unbounded(entries, NOW)[user].score == 3

    def test_users_without_entries_are_absent(self, entry_factory):
        user = uuid.uuid4()
        scores = ScoreAggregator.unbounded([entry_factory(user, 1, action_date=TODAY)], NOW)
        assert set(scores) == {user}
        assert ScoreAggregator.unbounded([], NOW) == {}

    def test_created_at_used_when_action_date_missing(self, entry_factory):
        user = uuid.uuid4()
        entry = entry_factory(user, 4, action_date=YESTERDAY)
        entry.action_date = None

        score = ScoreAggregator.unbounded([entry], NOW)[user]

        assert score.previous_score == 4

    def test_naive_timestamps_are_read_as_utc(self, entry_factory):
        user = uuid.uuid4()
        entry = entry_factory(user, 2, action_date=YESTERDAY.astimezone(timezone.utc).replace(tzinfo=None))

        assert ScoreAggregator.unbounded([entry], NOW)[user].previous_score == 2


class TestBoundedScores:
    """Base reputation plus points, clamped (workspace views)."""

    def test_base_reputation_applied(self, entry_factory):
        user = uuid.uuid4()
        scores = ScoreAggregator.bounded([entry_factory(user, 3, action_date=TODAY)], NOW)

        assert scores[user].score == 53
        assert scores[user].previous_score == 50
        assert scores[user].trend == Trend.UP

    def test_floor_clamps_heavy_penalties(self, entry_factory):
        user = uuid.uuid4()
        scores = ScoreAggregator.bounded([entry_factory(user, -80, action_date=TODAY)], NOW)
        assert scores[user].score == 0

    def test_trend_compares_clamped_values(self, entry_factory):
        user = uuid.uuid4()
        entries = [
            entry_factory(user, 70, action_date=YESTERDAY),
            entry_factory(user, 5, action_date=TODAY),
        ]

        score = ScoreAggregator.bounded(entries, NOW)[user]

        assert score.score == score.previous_score == 100
        assert score.trend == Trend.STABLE

    @pytest.mark.parametrize("total", [-1000, -80, -51, -50, -1, 0, 1, 49, 50, 51, 1000])
    def test_scores_stay_in_range(self, entry_factory, total):
        user = uuid.uuid4()
        entries = [
            entry_factory(user, total, action_date=YESTERDAY),
            entry_factory(user, -total, action_date=TODAY),
            entry_factory(user, total, action_date=TODAY),
        ]

        score = ScoreAggregator.bounded(entries, NOW)[user]

        for value in (score.score, score.previous_score):
            assert SCORE_POLICY.floor <= value <= SCORE_POLICY.ceiling

    def test_custom_policy(self, entry_factory):
        user = uuid.uuid4()
        policy = ScorePolicy(base_reputation=10, floor=0, ceiling=20)
        scores = ScoreAggregator.bounded([entry_factory(user, 15, action_date=TODAY)], NOW, policy)
        assert scores[user].score == 20


def test_trend_for():
    assert trend_for(2, 1) == Trend.UP
    assert trend_for(1, 2) == Trend.DOWN
    assert trend_for(1, 1) == Trend.STABLE
