"""
Unit Tests for the Curriculum Scheduler

Week math, weekly promotion of planned items and sweep idempotence.
"""

from datetime import date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from tutorgate.release import CurriculumScheduler, run_curriculum_sweep
from tutorgate.release.curriculum import ClassSchedule, current_week, week_to_release
from tutorgate.release.memory import ContentRecord, InMemoryReleaseStore


def _schedule(start: date | None, duration: int = 4, **kwargs) -> ClassSchedule:
    return ClassSchedule(
        class_id=kwargs.pop("class_id", uuid4()),
        name=kwargs.pop("name", "Class"),
        start_date=start,
        duration_weeks=duration,
        **kwargs,
    )


def _plan_week(store: InMemoryReleaseStore, class_id: UUID, week: int, count: int) -> list[UUID]:
    ids = []
    for i in range(count):
        record = store.add_item(ContentRecord(uuid4(), "exercise", f"Week {week} #{i}"))
        ids.append(record.item_id)
    store.set_plan(class_id, week, ids)
    return ids


class TestWeekMath:
    @pytest.mark.parametrize(
        "days_elapsed, expected",
        [(0, 1), (6, 1), (7, 2), (10, 2), (13, 2), (14, 3), (-1, 0), (-7, 0), (-8, -1)],
    )
    def test_current_week(self, now, days_elapsed, expected):
        today = now.date()

        assert current_week(today - timedelta(days=days_elapsed), today) == expected

    def test_ten_days_in_is_week_two(self, now):
        today = now.date()

        assert week_to_release(_schedule(today - timedelta(days=10)), today) == 2

    def test_before_start_releases_nothing(self, now):
        today = now.date()

        assert week_to_release(_schedule(today + timedelta(days=1)), today) is None

    def test_after_last_week_releases_nothing(self, now):
        today = now.date()

        assert week_to_release(_schedule(today - timedelta(days=40), duration=4), today) is None

    def test_last_day_of_last_week_still_releases(self, now):
        today = now.date()

        assert week_to_release(_schedule(today - timedelta(days=27), duration=4), today) == 4

    @pytest.mark.parametrize(
        "schedule",
        [
            _schedule(None),
            _schedule(date(2026, 3, 1), duration=0),
            _schedule(date(2026, 3, 1), schedule_active=False),
            _schedule(date(2026, 3, 1), is_active=False),
        ],
    )
    def test_no_schedule_cases(self, schedule, now):
        assert week_to_release(schedule, now.date()) is None


class TestAdvanceClass:
    async def test_promotes_current_week_only(self, store, now):
        schedule = _schedule(now.date() - timedelta(days=10))
        store.add_schedule(schedule)
        week1 = _plan_week(store, schedule.class_id, 1, 1)
        week2 = _plan_week(store, schedule.class_id, 2, 2)
        week3 = _plan_week(store, schedule.class_id, 3, 1)

        created = await CurriculumScheduler(store).advance_class(schedule, now)

        assert [a.content_id for a in created] == week2
        assert all(a.week_number == 2 for a in created)
        for item_id in week2:
            assert schedule.class_id in store.items[item_id].class_ids
        for item_id in week1 + week3:
            assert schedule.class_id not in store.items[item_id].class_ids

    async def test_existing_assignment_is_not_reinserted(self, store, now):
        schedule = _schedule(now.date())
        store.add_schedule(schedule)
        (item_id,) = _plan_week(store, schedule.class_id, 1, 1)
        store.items[item_id].class_ids.add(schedule.class_id)

        created = await CurriculumScheduler(store).advance_class(schedule, now)

        assert created == []
        assert store.insert_calls == 0

    async def test_keeps_unrelated_class_assignments(self, store, now):
        schedule = _schedule(now.date())
        other_class = uuid4()
        (item_id,) = _plan_week(store, schedule.class_id, 1, 1)
        store.items[item_id].class_ids.add(other_class)

        await CurriculumScheduler(store).advance_class(schedule, now)

        assert store.items[item_id].class_ids == {other_class, schedule.class_id}


class TestCurriculumSweep:
    async def test_sweep_twice_creates_each_assignment_once(self, store, now):
        schedule = _schedule(now.date() - timedelta(days=10))
        store.add_schedule(schedule)
        _plan_week(store, schedule.class_id, 2, 3)

        first = await run_curriculum_sweep(store, now)
        second = await run_curriculum_sweep(store, now)

        assert len(first.promoted) == 3
        assert second.promoted == []
        assert store.insert_calls == 3

    async def test_inactive_and_out_of_range_classes_are_no_ops(self, store, now):
        today = now.date()
        not_started = _schedule(today + timedelta(days=1))
        concluded = _schedule(today - timedelta(days=40), duration=4)
        paused = _schedule(today, schedule_active=False)
        for schedule in (not_started, concluded, paused):
            store.add_schedule(schedule)
            for week in range(1, 7):
                _plan_week(store, schedule.class_id, week, 1)

        result = await run_curriculum_sweep(store, now)

        assert result.promoted == []
        assert result.classes_checked == 2
        assert store.insert_calls == 0

    async def test_failing_class_does_not_stop_the_sweep(self, store, now):
        broken = _schedule(now.date(), name="Broken")
        healthy = _schedule(now.date(), name="Healthy")
        store.add_schedule(broken)
        store.add_schedule(healthy)
        # Plan points at an item that no longer exists
        store.set_plan(broken.class_id, 1, [uuid4()])
        (item_id,) = _plan_week(store, healthy.class_id, 1, 1)

        result = await run_curriculum_sweep(store, now)

        assert result.failed_class_ids == [broken.class_id]
        assert [a.content_id for a in result.promoted] == [item_id]
        assert result.classes_checked == 2

    async def test_promotion_survives_week_change(self, store):
        start = date(2026, 3, 2)
        schedule = _schedule(start)
        store.add_schedule(schedule)
        week1 = _plan_week(store, schedule.class_id, 1, 1)
        week2 = _plan_week(store, schedule.class_id, 2, 1)

        await run_curriculum_sweep(store, datetime(2026, 3, 3, 0, 1))
        await run_curriculum_sweep(store, datetime(2026, 3, 10, 0, 1))

        assert schedule.class_id in store.items[week1[0]].class_ids
        assert schedule.class_id in store.items[week2[0]].class_ids

    async def test_failed_class_keeps_no_partial_promotion(self, store, now):
        broken = _schedule(now.date(), name="Broken")
        healthy = _schedule(now.date(), name="Healthy")
        store.add_schedule(broken)
        store.add_schedule(healthy)
        (released,) = _plan_week(store, broken.class_id, 1, 1)
        # Second planned item is missing, so the class fails after one insert
        store.set_plan(broken.class_id, 1, [released, uuid4()])
        (item_id,) = _plan_week(store, healthy.class_id, 1, 1)

        result = await run_curriculum_sweep(store, now)

        assert result.failed_class_ids == [broken.class_id]
        assert broken.class_id not in store.items[released].class_ids
        assert healthy.class_id in store.items[item_id].class_ids
