"""
출석 통계 서비스 - 현재/예상 출석률과 스마트 번크 계산
"""
import math
import logging
from datetime import date

from config import Config
from models import AttendanceSummary, ValidationError, GLOBAL_STATUSES
from services.calendar_service import compute_calendar_days, parse_date
from services.state_service import DayStatusStore, load_timetable, load_semester

logger = logging.getLogger(__name__)


def _percentage(part, whole):
    return (part / whole) * 100 if whole > 0 else 0.0


def compute_attendance(course_id, timetable, semester, records, global_marks, today=None):
    """학기 전체를 과거/미래로 나누어 출석 통계 계산

    과거: 기준값에서 소급 휴일/시험 수업 수를 빼고 attended <= total 로 제한
    미래: 휴일/시험을 제외한 수업 수 합계에서 계획된 번크 수를 뺀다
    """
    if timetable is None or semester is None:
        return AttendanceSummary()
    course = semester.get_course(course_id)
    if course is None:
        return AttendanceSummary()

    today = parse_date(today) if today else date.today()

    past_holiday_exam_classes = 0
    future_classes = 0
    bunked_future_classes = 0

    days = compute_calendar_days(
        course_id, semester.start_date, semester.end_date,
        timetable, semester, records, global_marks,
    )
    for day in days:
        if day.class_count == 0:
            continue
        is_past = parse_date(day.date) < today
        if day.status in GLOBAL_STATUSES:
            if is_past:
                past_holiday_exam_classes += day.class_count
            continue
        if not is_past:
            future_classes += day.class_count
            bunked_future_classes += min(day.bunked_classes, day.class_count)

    total_past = max(0, course.total_classes - past_holiday_exam_classes)
    attended_past = min(course.attended_classes, total_past)

    total_classes = total_past + future_classes
    attended_classes = attended_past + (future_classes - bunked_future_classes)

    return AttendanceSummary(
        current_percentage=_percentage(attended_past, total_past),
        predicted_percentage=_percentage(attended_classes, total_classes),
        total_classes=total_classes,
        attended_classes=attended_classes,
        total_past_classes=total_past,
        attended_past_classes=attended_past,
        total_future_classes=future_classes,
        bunked_future_classes=bunked_future_classes,
    )


def attendance_for_course(storage, course_id, today=None):
    """저장소 문서 기준 과목 출석 통계"""
    store = DayStatusStore(storage)
    return compute_attendance(
        course_id, load_timetable(storage), load_semester(storage),
        store.subject_records(course_id), store.load_global(), today=today,
    )


def validate_target(target):
    try:
        value = float(target)
    except (TypeError, ValueError):
        raise ValidationError("목표 출석률은 숫자여야 합니다.")
    if not Config.MIN_TARGET_PERCENTAGE <= value <= Config.MAX_TARGET_PERCENTAGE:
        raise ValidationError(
            f"목표 출석률은 {Config.MIN_TARGET_PERCENTAGE}~{Config.MAX_TARGET_PERCENTAGE}% 사이여야 합니다."
        )
    return value


def compute_smart_bunk(summary, target=Config.DEFAULT_TARGET_PERCENTAGE):
    """목표 출석률을 유지하면서 추가로 빠질 수 있는 수업 수"""
    target = validate_target(target)
    if summary.total_classes == 0:
        return 0
    # 곱한 뒤 100으로 나눔 (0.7 * 10 -> 7.000000000000001)
    min_required = math.ceil(target * summary.total_classes / 100)
    return max(0, summary.attended_classes - min_required)
