"""Tests for calendar projection, day edits and the month grid window."""
from datetime import date

import pytest

from config import Config
from models import DayRecord, Timetable, Semester, ValidationError, NotFoundError
from services.calendar_service import (
    weekday_name, compute_calendar_days, calendar_for_course, apply_day_edit,
    toggle_day_mark, month_grid_range, initial_month, shift_month, parse_date,
    month_in_semester, clamp_to_semester,
)
from services.state_service import DayStatusStore, save_semester

JAN_START = date(2024, 1, 1)  # Monday


def test_weekday_name_is_sunday_first():
    assert weekday_name(date(2024, 1, 7)) == "Sunday"
    assert weekday_name(date(2024, 1, 1)) == "Monday"
    assert weekday_name(date(2024, 1, 6)) == "Saturday"


def test_parse_date_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_date("2024/01/01")


def test_class_days_follow_slots_for_the_course(timetable_doc, semester_doc):
    """Tue/Wed carry one CS101 class each, every other day none."""
    timetable = Timetable.from_dict(timetable_doc)
    semester = Semester.from_dict(semester_doc)

    days = compute_calendar_days("CS101", "2024-01-01", "2024-01-31", timetable, semester, {}, {})

    assert len(days) == 31
    for day in days:
        weekday = weekday_name(parse_date(day.date))
        if weekday in ("Tuesday", "Wednesday"):
            assert day.class_count == 1
            assert day.status == "attending"
        else:
            assert day.class_count == 0
            assert day.status == "normal"
        assert day.bunked_classes == 0
    assert sum(d.class_count for d in days) == 10


def test_working_days_do_not_gate_class_count(timetable_doc, semester_doc):
    timetable_doc["workingDays"] = ["Monday"]
    timetable = Timetable.from_dict(timetable_doc)
    semester = Semester.from_dict(semester_doc)

    days = compute_calendar_days("CS101", "2024-01-02", "2024-01-03", timetable, semester, {}, {})

    assert [d.class_count for d in days] == [1, 1]
    assert [d.status for d in days] == ["attending", "attending"]


def test_days_outside_semester_default_to_normal(timetable_doc, semester_doc):
    timetable = Timetable.from_dict(timetable_doc)
    semester = Semester.from_dict(semester_doc)

    days = compute_calendar_days("CS101", "2024-02-06", "2024-02-06", timetable, semester, {}, {})

    assert days[0].class_count == 1
    assert days[0].status == "normal"


def test_projection_is_deterministic(seeded):
    first = calendar_for_course(seeded, "CS101")
    second = calendar_for_course(seeded, "CS101")
    assert first == second


def test_missing_setup_yields_empty_projection(storage):
    assert calendar_for_course(storage, "CS101") == []
    assert compute_calendar_days("CS101", "2024-01-01", "2024-01-31", None, None, {}, {}) == []


def test_global_mark_overrides_subject_record(timetable_doc, semester_doc):
    timetable = Timetable.from_dict(timetable_doc)
    semester = Semester.from_dict(semester_doc)
    records = {"2024-01-09": DayRecord(status="bunking", bunked_classes=1)}

    days = compute_calendar_days(
        "CS101", "2024-01-09", "2024-01-09", timetable, semester, records, {"2024-01-09": "exam"}
    )

    assert days[0].status == "exam"
    assert days[0].bunked_classes == 0


def test_subject_record_overrides_default(timetable_doc, semester_doc):
    timetable = Timetable.from_dict(timetable_doc)
    semester = Semester.from_dict(semester_doc)
    records = {"2024-01-09": DayRecord(status="bunking", bunked_classes=1)}

    day = compute_calendar_days("CS101", "2024-01-09", "2024-01-09", timetable, semester, records, {})[0]

    assert day.status == "bunking"
    assert day.bunked_classes == 1


# ===== apply_day_edit =====

def test_holiday_propagates_to_every_selected_course(seeded):
    apply_day_edit(seeded, "CS101", "2024-01-09", "holiday", today=JAN_START)

    store = DayStatusStore(seeded)
    assert store.load_global() == {"2024-01-09": "holiday"}
    for course_id in ("CS101", "MA201"):
        day = calendar_for_course(seeded, course_id, "2024-01-09", "2024-01-09")[0]
        assert day.status == "holiday"
        record = store.subject_records(course_id)["2024-01-09"]
        assert record.status == "holiday"
        assert record.bunked_classes == 0


def test_remarking_holiday_leaves_state_unchanged(seeded):
    apply_day_edit(seeded, "CS101", "2024-01-09", "holiday", today=JAN_START)
    before = (seeded.get(Config.CALENDAR_KEY), seeded.get(Config.GLOBAL_STATUS_KEY))

    apply_day_edit(seeded, "CS101", "2024-01-09", "holiday", today=JAN_START)

    assert (seeded.get(Config.CALENDAR_KEY), seeded.get(Config.GLOBAL_STATUS_KEY)) == before


def test_toggle_holiday_twice_restores_status(seeded):
    before = calendar_for_course(seeded, "MA201", "2024-01-09", "2024-01-09")[0]

    marked = toggle_day_mark(seeded, "CS101", "2024-01-09", "holiday", today=JAN_START)
    cleared = toggle_day_mark(seeded, "CS101", "2024-01-09", "holiday", today=JAN_START)

    assert marked.status == "holiday"
    assert cleared.status == "attending"
    assert DayStatusStore(seeded).load_global() == {}
    after = calendar_for_course(seeded, "MA201", "2024-01-09", "2024-01-09")[0]
    assert after == before


def test_toggle_exam_on_holiday_switches_mark(seeded):
    toggle_day_mark(seeded, "CS101", "2024-01-10", "holiday", today=JAN_START)
    day = toggle_day_mark(seeded, "CS101", "2024-01-10", "exam", today=JAN_START)
    assert day.status == "exam"
    assert DayStatusStore(seeded).load_global() == {"2024-01-10": "exam"}


def test_toggle_rejects_non_global_mark(seeded):
    with pytest.raises(ValidationError):
        toggle_day_mark(seeded, "CS101", "2024-01-10", "bunking", today=JAN_START)


def test_clearing_mark_on_day_without_classes_gives_normal(seeded):
    apply_day_edit(seeded, "CS101", "2024-01-11", "exam", today=JAN_START)
    day = apply_day_edit(seeded, "CS101", "2024-01-11", "normal", today=JAN_START)
    assert day.status == "normal"
    assert day.class_count == 0


@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_bunk_count_round_trip(seeded, k):
    apply_day_edit(seeded, "MA201", "2024-01-08", "bunking", k, today=JAN_START)
    day = calendar_for_course(seeded, "MA201", "2024-01-08", "2024-01-08")[0]
    assert day.bunked_classes == k
    assert day.status == ("attending" if k == 0 else "bunking")


def test_partial_bunk_then_attend_again(seeded):
    day = apply_day_edit(seeded, "MA201", "2024-01-08", "bunking", 1, today=JAN_START)
    assert day.class_count == 3
    assert day.status == "bunking"
    assert day.bunked_classes == 1

    day = apply_day_edit(seeded, "MA201", "2024-01-08", "bunking", 0, today=JAN_START)
    assert day.status == "attending"
    assert day.bunked_classes == 0


def test_bunk_does_not_touch_global_or_other_courses(seeded):
    apply_day_edit(seeded, "MA201", "2024-01-09", "bunking", 1, today=JAN_START)
    store = DayStatusStore(seeded)
    assert store.load_global() == {}
    assert store.subject_records("CS101") == {}


@pytest.mark.parametrize("k", [-1, 4, "two"])
def test_bunk_count_outside_range_is_rejected(seeded, k):
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "MA201", "2024-01-08", "bunking", k, today=JAN_START)
    assert seeded.get(Config.CALENDAR_KEY) is None


def test_bunk_on_day_without_classes_is_rejected(seeded):
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "CS101", "2024-01-11", "bunking", 0, today=JAN_START)


def test_bunk_on_marked_day_is_rejected(seeded):
    apply_day_edit(seeded, "CS101", "2024-01-09", "exam", today=JAN_START)
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "CS101", "2024-01-09", "bunking", 1, today=JAN_START)


def test_exam_mark_zeroes_existing_bunk(seeded):
    apply_day_edit(seeded, "MA201", "2024-01-08", "bunking", 2, today=JAN_START)
    day = apply_day_edit(seeded, "MA201", "2024-01-08", "exam", today=JAN_START)
    assert day.status == "exam"
    assert day.bunked_classes == 0

    day = apply_day_edit(seeded, "MA201", "2024-01-08", "attending", today=JAN_START)
    assert day.status == "attending"
    assert day.bunked_classes == 0


def test_edit_on_yesterday_is_rejected_and_today_accepted(seeded):
    today = date(2024, 1, 10)
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "CS101", "2024-01-09", "holiday", today=today)

    day = apply_day_edit(seeded, "CS101", "2024-01-10", "bunking", 1, today=today)
    assert day.status == "bunking"


def test_edit_outside_semester_is_rejected(seeded):
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "CS101", "2024-02-06", "holiday", today=JAN_START)
    assert seeded.get(Config.GLOBAL_STATUS_KEY) is None


def test_edit_for_unknown_course_is_not_found(seeded):
    with pytest.raises(NotFoundError):
        apply_day_edit(seeded, "PH999", "2024-01-09", "holiday", today=JAN_START)


def test_edit_with_unknown_status_is_rejected(seeded):
    with pytest.raises(ValidationError):
        apply_day_edit(seeded, "CS101", "2024-01-09", "skipping", today=JAN_START)


def test_edit_without_semester_is_rejected(storage):
    with pytest.raises(ValidationError):
        apply_day_edit(storage, "CS101", "2024-01-09", "holiday", today=JAN_START)


def test_edit_without_timetable_is_rejected_before_saving(storage, semester_doc):
    save_semester(storage, Semester.from_dict(semester_doc))
    with pytest.raises(ValidationError):
        apply_day_edit(storage, "CS101", "2024-01-09", "holiday", today=JAN_START)
    assert storage.get(Config.GLOBAL_STATUS_KEY) is None
    assert storage.get(Config.CALENDAR_KEY) is None


# ===== month grid =====

def test_month_grid_spans_full_weeks(semester_doc):
    semester = Semester.from_dict(semester_doc)
    assert month_grid_range(semester, 2024, 1) == (date(2023, 12, 31), date(2024, 2, 3))


def test_month_grid_is_pulled_back_to_semester_end_week(semester_doc):
    semester_doc["endDate"] = "2024-01-17"
    semester = Semester.from_dict(semester_doc)
    assert month_grid_range(semester, 2024, 1) == (date(2023, 12, 31), date(2024, 1, 20))


def test_initial_month(semester_doc):
    semester = Semester.from_dict(semester_doc)
    assert initial_month(semester, today=date(2024, 1, 20)) == (2024, 1)
    assert initial_month(semester, today=date(2023, 6, 1)) == (2024, 1)


def test_shift_month_stays_inside_semester(semester_doc):
    semester_doc["startDate"] = "2023-11-15"
    semester_doc["endDate"] = "2024-02-10"
    semester = Semester.from_dict(semester_doc)

    assert shift_month(semester, 2023, 12, 1) == (2024, 1)
    assert shift_month(semester, 2024, 1, -1) == (2023, 12)
    assert shift_month(semester, 2023, 11, -1) == (2023, 11)
    assert shift_month(semester, 2024, 2, 1) == (2024, 2)


def test_month_in_semester(semester_doc):
    semester_doc["startDate"] = "2023-11-15"
    semester_doc["endDate"] = "2024-02-10"
    semester = Semester.from_dict(semester_doc)

    assert month_in_semester(semester, 2023, 11)
    assert month_in_semester(semester, 2024, 2)
    assert not month_in_semester(semester, 2023, 10)
    assert not month_in_semester(semester, 2999, 12)


def test_clamp_to_semester(semester_doc):
    semester = Semester.from_dict(semester_doc)
    assert clamp_to_semester(semester, "1000-01-01", "2999-12-31") == (date(2024, 1, 1), date(2024, 1, 31))
    assert clamp_to_semester(semester, "2024-01-10", "2024-01-12") == (date(2024, 1, 10), date(2024, 1, 12))

    start, end = clamp_to_semester(semester, "2025-01-01", "2025-02-01")
    assert start > end
