"""Tests for taskpulse.core.scoring — urgency/importance scoring, ranking, quadrants."""

from datetime import datetime, timedelta, timezone

import pytest

from taskpulse.core.scoring import (
    OVERDUE_REASON,
    QUADRANT_INFO,
    Quadrant,
    TaskScore,
    apply_quadrant_action,
    classify_quadrants,
    eligible_tasks,
    quadrant_for,
    rank_tasks,
    score_task,
)
from taskpulse.data.models import Priority, Status


def _due_in(now, days):
    return (now.date() + timedelta(days=days)).isoformat()


# ---------------------------------------------------------------------------
# Urgency
# ---------------------------------------------------------------------------


class TestUrgency:
    def test_plain_low_task_scores_zero(self, make_task, now):
        score = score_task(make_task(), now)
        assert score.urgency == 0
        assert score.importance == 0
        assert score.reasons == []

    def test_due_today_urgent(self, make_task, now):
        task = make_task(due_date=_due_in(now, 0), priority=Priority.URGENT)
        score = score_task(task, now)
        assert score.urgency == 70
        assert score.reasons[:2] == ["Due today", "Marked as urgent priority"]

    def test_overdue_low_priority_scores_fifty(self, make_task, now):
        task = make_task(due_date=_due_in(now, -3))
        score = score_task(task, now)
        assert score.urgency == 50
        assert score.reasons == [OVERDUE_REASON]

    def test_overdue_reason_is_first(self, make_task, now):
        task = make_task(
            due_date=_due_in(now, -1),
            priority=Priority.HIGH,
            estimated_duration=300,
        )
        score = score_task(task, now)
        assert score.reasons[0] == OVERDUE_REASON
        assert "High priority task" in score.reasons

    @pytest.mark.parametrize(
        "days, bonus, reason",
        [
            (1, 40, "Due tomorrow"),
            (2, 25, "Due in 2 days"),
            (3, 25, "Due in 3 days"),
            (4, 15, "Due this week"),
            (7, 15, "Due this week"),
        ],
    )
    def test_due_proximity(self, make_task, now, days, bonus, reason):
        score = score_task(make_task(due_date=_due_in(now, days)), now)
        assert score.urgency == bonus
        assert score.reasons == [reason]

    def test_due_beyond_a_week_adds_nothing(self, make_task, now):
        assert score_task(make_task(due_date=_due_in(now, 8)), now).urgency == 0

    @pytest.mark.parametrize(
        "priority, expected",
        [(Priority.URGENT, 30), (Priority.HIGH, 20), (Priority.MEDIUM, 10), (Priority.LOW, 0)],
    )
    def test_priority_urgency(self, make_task, now, priority, expected):
        assert score_task(make_task(priority=priority), now).urgency == expected

    def test_plain_string_priority_scores_like_enum(self, make_task, now):
        score = score_task(make_task(priority="Urgent"), now)
        assert score.urgency == 30
        assert score.importance == 25
        assert score.reasons == ["Marked as urgent priority"]

    def test_unknown_priority_adds_nothing(self, make_task, now):
        score = score_task(make_task(priority="Someday"), now)
        assert score.urgency == 0
        assert score.importance == 0

    def test_stale_todo_after_seven_days(self, make_task, now):
        task = make_task(created_at=(now - timedelta(days=7)).isoformat())
        score = score_task(task, now)
        assert score.urgency == 15
        assert score.reasons == ["Been pending for 7 days"]

    def test_not_stale_just_under_seven_days(self, make_task, now):
        task = make_task(created_at=(now - timedelta(days=7) + timedelta(minutes=30)).isoformat())
        assert score_task(task, now).urgency == 0

    def test_stale_only_applies_to_todo(self, make_task, now):
        task = make_task(
            created_at=(now - timedelta(days=30)).isoformat(),
            status=Status.IN_PROGRESS,
        )
        assert score_task(task, now).urgency == 0

    def test_stale_with_utc_timestamp_and_aware_now(self, make_task):
        now = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
        task = make_task(created_at="2026-03-01T00:00:00Z")
        assert score_task(task, now).urgency == 15

    def test_malformed_due_date_is_ignored(self, make_task, now):
        task = make_task(due_date="next tuesday", priority=Priority.HIGH)
        score = score_task(task, now)
        assert score.urgency == 20

    def test_malformed_created_at_is_ignored(self, make_task, now):
        task = make_task(created_at="garbage")
        assert score_task(task, now).urgency == 0

    def test_urgency_never_decreases_as_deadline_approaches(self, make_task, now):
        previous = -1
        for days in range(10, -4, -1):
            task = make_task(due_date=_due_in(now, days), priority=Priority.MEDIUM)
            urgency = score_task(task, now).urgency
            assert urgency >= previous
            previous = urgency


# ---------------------------------------------------------------------------
# Importance
# ---------------------------------------------------------------------------


class TestImportance:
    @pytest.mark.parametrize(
        "priority, expected",
        [(Priority.URGENT, 25), (Priority.HIGH, 35), (Priority.MEDIUM, 15), (Priority.LOW, 0)],
    )
    def test_priority_importance(self, make_task, now, priority, expected):
        assert score_task(make_task(priority=priority), now).importance == expected

    @pytest.mark.parametrize(
        "minutes, expected",
        [(None, 0), (30, 0), (59, 0), (60, 15), (119, 15), (120, 20), (240, 30), (600, 30)],
    )
    def test_estimated_duration(self, make_task, now, minutes, expected):
        assert score_task(make_task(estimated_duration=minutes), now).importance == expected

    def test_keyword_in_title(self, make_task, now):
        score = score_task(make_task(title="Difficult database migration"), now)
        assert score.importance == 25
        assert score.reasons == ["Challenging task that could unlock progress"]

    def test_keyword_in_description(self, make_task, now):
        task = make_task(description="A rather Challenging refactor")
        assert score_task(task, now).importance == 25

    def test_keyword_counted_once(self, make_task, now):
        task = make_task(title="complex and difficult", description="challenging")
        assert score_task(task, now).importance == 25

    def test_todays_frog(self, make_task, now):
        task = make_task(is_eat_that_frog=True, eat_that_frog_date=now.date().isoformat())
        score = score_task(task, now)
        assert score.importance == 40
        assert "Designated as today's frog" in score.reasons

    def test_frog_without_date_counts(self, make_task, now):
        assert score_task(make_task(is_eat_that_frog=True), now).importance == 40

    def test_frog_for_another_day_does_not_count(self, make_task, now):
        task = make_task(is_eat_that_frog=True, eat_that_frog_date="2026-03-01")
        assert score_task(task, now).importance == 0


class TestScoreProperties:
    def test_deterministic(self, make_task, now):
        task = make_task(
            due_date=_due_in(now, 2), priority=Priority.HIGH,
            estimated_duration=90, title="complex thing",
        )
        first = score_task(task, now)
        second = score_task(task, now)
        assert (first.urgency, first.importance, first.reasons) == (
            second.urgency, second.importance, second.reasons,
        )

    def test_does_not_mutate_task(self, make_task, now):
        task = make_task(due_date=_due_in(now, -2), priority=Priority.URGENT)
        before = dict(task.__dict__)
        score_task(task, now)
        assert task.__dict__ == before

    def test_total(self, make_task, now):
        score = score_task(make_task(priority=Priority.HIGH), now)
        assert score.total == 20 + 35


# ---------------------------------------------------------------------------
# Ranked list mode
# ---------------------------------------------------------------------------


class TestRankTasks:
    def test_drops_tasks_below_threshold(self, make_task, now):
        low = make_task()
        medium = make_task(priority=Priority.MEDIUM)
        ranking = rank_tasks([low, medium], now)
        assert [s.task.id for s in ranking.candidates] == [medium.id]

    def test_sorted_descending_and_top_pick(self, make_task, now):
        medium = make_task(priority=Priority.MEDIUM)
        urgent = make_task(priority=Priority.URGENT, due_date=_due_in(now, 0))
        high = make_task(priority=Priority.HIGH)
        ranking = rank_tasks([medium, urgent, high], now)
        assert [s.task.id for s in ranking.candidates] == [urgent.id, high.id, medium.id]
        assert ranking.top_pick.task.id == urgent.id

    def test_limited_to_five(self, make_task, now):
        tasks = [make_task(priority=Priority.HIGH) for _ in range(8)]
        assert len(rank_tasks(tasks, now).candidates) == 5

    def test_ties_keep_input_order(self, make_task, now):
        tasks = [make_task(priority=Priority.MEDIUM) for _ in range(4)]
        ranking = rank_tasks(tasks, now)
        assert [s.task.id for s in ranking.candidates] == [t.id for t in tasks]

    def test_done_tasks_excluded(self, make_task, now):
        done = make_task(priority=Priority.URGENT, status=Status.DONE)
        assert rank_tasks([done], now).candidates == []

    def test_assignee_filter(self, make_task, now):
        mine = make_task(priority=Priority.HIGH, assignee_id="u1")
        theirs = make_task(priority=Priority.URGENT, assignee_id="u2")
        ranking = rank_tasks([mine, theirs], now, assignee_id="u1")
        assert [s.task.id for s in ranking.candidates] == [mine.id]

    def test_empty_ranking_has_no_top_pick(self, now):
        assert rank_tasks([], now).top_pick is None

    def test_bad_record_does_not_break_ranking(self, make_task, now):
        bad = make_task(due_date="31/31/2026", created_at="??", priority=Priority.HIGH)
        good = make_task(priority=Priority.URGENT)
        ranking = rank_tasks([bad, good], now)
        assert {s.task.id for s in ranking.candidates} == {bad.id, good.id}


# ---------------------------------------------------------------------------
# Quadrant mode
# ---------------------------------------------------------------------------


class TestQuadrants:
    def test_threshold_boundary(self, make_task):
        task = make_task()
        assert quadrant_for(TaskScore(task, urgency=24, importance=0)) == Quadrant.ELIMINATE
        assert quadrant_for(TaskScore(task, urgency=25, importance=0)) == Quadrant.DELEGATE
        assert quadrant_for(TaskScore(task, urgency=0, importance=24)) == Quadrant.ELIMINATE
        assert quadrant_for(TaskScore(task, urgency=0, importance=25)) == Quadrant.SCHEDULE
        assert quadrant_for(TaskScore(task, urgency=25, importance=25)) == Quadrant.DO_FIRST

    def test_each_quadrant(self, make_task, now):
        do_first = make_task(priority=Priority.URGENT, due_date=_due_in(now, 0))
        schedule = make_task(priority=Priority.HIGH)
        delegate = make_task(due_date=_due_in(now, 0))
        eliminate = make_task()
        result = classify_quadrants([do_first, schedule, delegate, eliminate], now)
        assert [s.task.id for s in result[Quadrant.DO_FIRST]] == [do_first.id]
        assert [s.task.id for s in result[Quadrant.SCHEDULE]] == [schedule.id]
        assert [s.task.id for s in result[Quadrant.DELEGATE]] == [delegate.id]
        assert [s.task.id for s in result[Quadrant.ELIMINATE]] == [eliminate.id]

    def test_partition_is_complete(self, make_task, now):
        tasks = [
            make_task(priority=p, due_date=_due_in(now, d), estimated_duration=m)
            for p in Priority
            for d in (-2, 0, 2, 5, 10)
            for m in (None, 60, 240)
        ]
        tasks.append(make_task(status=Status.DONE, priority=Priority.URGENT))
        result = classify_quadrants(tasks, now)
        assert set(result) == set(Quadrant)
        placed = [s.task.id for scores in result.values() for s in scores]
        assert len(placed) == len(set(placed))
        assert set(placed) == {t.id for t in eligible_tasks(tasks)}

    def test_all_quadrants_present_when_empty(self, now):
        result = classify_quadrants([], now)
        assert all(result[q] == [] for q in Quadrant)

    def test_quadrant_info_suggested_priorities(self):
        assert QUADRANT_INFO[Quadrant.DO_FIRST].suggested_priority == Priority.URGENT
        assert QUADRANT_INFO[Quadrant.SCHEDULE].suggested_priority == Priority.HIGH
        assert QUADRANT_INFO[Quadrant.DELEGATE].suggested_priority == Priority.MEDIUM
        assert QUADRANT_INFO[Quadrant.ELIMINATE].suggested_priority == Priority.LOW
        assert QUADRANT_INFO[Quadrant.DO_FIRST].title == "Do First"

    def test_apply_quadrant_action_returns_copy(self, make_task, now):
        task = make_task(priority=Priority.LOW)
        updated = apply_quadrant_action(task, Quadrant.SCHEDULE, now)
        assert updated.priority == Priority.HIGH
        assert updated.updated_at == now.isoformat()
        assert task.priority == Priority.LOW

    def test_classification_does_not_change_priorities(self, make_task, now):
        task = make_task(priority=Priority.LOW, due_date=_due_in(now, 0))
        classify_quadrants([task], now)
        assert task.priority == Priority.LOW
