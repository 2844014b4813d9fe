"""
캘린더 계산 서비스 - 시간표 + 과목별 기록 + 전역 휴일/시험 표시를 날짜별 상태로 병합
"""
import calendar as _calendar
import logging
from datetime import date, datetime, timedelta

from models import (
    CalendarDay, ValidationError, NotFoundError, WEEKDAY_NAMES, DAY_STATUSES, GLOBAL_STATUSES,
    ZERO_BUNK_STATUSES, ATTENDING, BUNKING, NORMAL,
)
from services.state_service import DayStatusStore, subject_key, load_timetable, load_semester

logger = logging.getLogger(__name__)


def parse_date(value):
    """date 또는 "YYYY-MM-DD" 문자열을 date로 변환"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"날짜 형식이 올바르지 않습니다. (YYYY-MM-DD): {value}")


def weekday_name(day):
    """요일 이름 (일요일=0 인덱스 기준, 로케일과 무관)"""
    return WEEKDAY_NAMES[(day.weekday() + 1) % 7]


def iter_dates(start, end):
    """start ~ end (양 끝 포함) 날짜 순회"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def semester_bounds(semester):
    return parse_date(semester.start_date), parse_date(semester.end_date)


def resolve_day(day, class_count, in_semester, record, global_mark):
    """단일 날짜 상태 결정

    우선순위: 전역 휴일/시험 > 과목별 저장 상태 > 기본값
    """
    default_status = ATTENDING if class_count > 0 and in_semester else NORMAL

    if global_mark in GLOBAL_STATUSES:
        status = global_mark
    elif record is not None:
        status = record.status
    else:
        status = default_status

    bunked = record.bunked_classes if record is not None else 0
    if status in ZERO_BUNK_STATUSES:
        bunked = 0

    return CalendarDay(
        date=day.isoformat(),
        status=status,
        class_count=class_count,
        bunked_classes=bunked,
    )


def compute_calendar_days(course_id, start, end, timetable, semester, records, global_marks):
    """과목의 날짜별 CalendarDay 목록 (start ~ end 포함)

    records: {"YYYY-MM-DD": DayRecord} (과목별), global_marks: {"YYYY-MM-DD": "holiday"|"exam"}
    시간표나 학기가 없으면 빈 목록.
    """
    if timetable is None or semester is None:
        return []

    start, end = parse_date(start), parse_date(end)
    sem_start, sem_end = semester_bounds(semester)

    days = []
    for day in iter_dates(start, end):
        date_str = day.isoformat()
        days.append(resolve_day(
            day,
            timetable.class_count(weekday_name(day), course_id),
            sem_start <= day <= sem_end,
            records.get(date_str),
            global_marks.get(date_str),
        ))
    return days


def calendar_for_course(storage, course_id, start=None, end=None):
    """저장소에서 문서를 읽어 과목 캘린더 계산 (기간 생략 시 학기 전체)"""
    timetable = load_timetable(storage)
    semester = load_semester(storage)
    if timetable is None or semester is None:
        return []

    store = DayStatusStore(storage)
    start = start or semester.start_date
    end = end or semester.end_date
    return compute_calendar_days(
        course_id, start, end, timetable, semester,
        store.subject_records(course_id), store.load_global(),
    )


# ===== 월 단위 캘린더 범위 =====

def _sunday_offset(day):
    return (day.weekday() + 1) % 7


def month_grid_range(semester, year, month):
    """월 캘린더 그리드 범위 (일요일 시작 ~ 토요일 끝)

    그리드 끝이 학기 종료일을 넘으면 학기 마지막 주의 토요일까지로 줄인다.
    """
    month_start = date(year, month, 1)
    month_end = date(year, month, _calendar.monthrange(year, month)[1])

    grid_start = month_start - timedelta(days=_sunday_offset(month_start))
    grid_end = month_end + timedelta(days=6 - _sunday_offset(month_end))

    if semester is not None:
        sem_end = parse_date(semester.end_date)
        if grid_end > sem_end:
            grid_end = sem_end + timedelta(days=6 - _sunday_offset(sem_end))
    return grid_start, grid_end


def initial_month(semester, today=None):
    """처음 표시할 (연, 월) - 오늘이 학기 중이면 이번 달, 아니면 학기 시작 월"""
    today = today or date.today()
    sem_start, sem_end = semester_bounds(semester)
    anchor = today if sem_start <= today <= sem_end else sem_start
    return anchor.year, anchor.month


def _month_index(year, month):
    return year * 12 + (month - 1)


def month_in_semester(semester, year, month):
    """학기 시작 월 ~ 종료 월 사이인지"""
    sem_start, sem_end = semester_bounds(semester)
    index = _month_index(year, month)
    return _month_index(sem_start.year, sem_start.month) <= index <= _month_index(sem_end.year, sem_end.month)


def shift_month(semester, year, month, step):
    """step(+1/-1)만큼 월 이동, 학기 시작/종료 월 밖으로는 이동하지 않음"""
    index = _month_index(year, month) + step
    if not month_in_semester(semester, index // 12, index % 12 + 1):
        return year, month
    return index // 12, index % 12 + 1


def clamp_to_semester(semester, start, end):
    """요청 기간을 학기 기간 안으로 제한 (겹치지 않으면 start > end)"""
    sem_start, sem_end = semester_bounds(semester)
    return max(parse_date(start), sem_start), min(parse_date(end), sem_end)


# ===== 날짜 수정 =====

def _validate_editable(semester, day, today):
    if semester is None:
        raise ValidationError("학기 정보가 설정되지 않았습니다.")
    if day < today:
        raise ValidationError("지난 날짜는 수정할 수 없습니다.")
    sem_start, sem_end = semester_bounds(semester)
    if day < sem_start or day > sem_end:
        raise ValidationError("학기 기간 밖의 날짜입니다.")


def _validate_bunk_count(value, class_count):
    if isinstance(value, bool):
        raise ValidationError("번크 수업 수는 정수여야 합니다.")
    try:
        count = value if isinstance(value, int) else int(str(value).strip())
    except ValueError:
        raise ValidationError("번크 수업 수는 정수여야 합니다.")
    if class_count == 0:
        raise ValidationError("이 날짜에는 수업이 없습니다.")
    if count < 0 or count > class_count:
        raise ValidationError(f"0에서 {class_count} 사이의 숫자를 입력해주세요.")
    return count


def _tracked_courses(semester, course_id):
    ids = list(semester.selected_courses)
    if course_id not in ids:
        ids.append(course_id)
    return ids


def apply_day_edit(storage, course_id, day, status, bunked_classes=0, today=None):
    """날짜 상태 변경 후 해당 날짜의 CalendarDay 반환

    - holiday/exam: 전역 표시 + 추적 중인 모든 과목 기록에 반영 (번크 0)
    - attending/normal: 전역 표시 해제, 과목 상태를 수업 유무에 따라 재계산
    - bunking: 과목 기록에만 번크 수 저장 (0이면 attending)
    검증 실패 시 ValidationError, 저장 상태는 변경되지 않음.
    """
    timetable = load_timetable(storage)
    semester = load_semester(storage)
    day = parse_date(day)
    today = parse_date(today) if today else date.today()

    _validate_editable(semester, day, today)
    if timetable is None:
        raise ValidationError("시간표가 설정되지 않았습니다.")
    if semester.get_course(course_id) is None:
        raise NotFoundError(f"과목을 찾을 수 없습니다: {course_id}")
    if status not in DAY_STATUSES:
        raise ValidationError(f"알 수 없는 상태입니다: {status}")

    store = DayStatusStore(storage)
    calendar = store.load_calendar()
    global_marks = store.load_global()
    date_str = day.isoformat()
    weekday = weekday_name(day)

    def count_for(cid):
        return timetable.class_count(weekday, cid)

    def default_record(cid):
        return {"status": ATTENDING if count_for(cid) > 0 else NORMAL, "bunkedClasses": 0}

    if status in GLOBAL_STATUSES:
        global_marks[date_str] = status
        for cid in _tracked_courses(semester, course_id):
            calendar.setdefault(subject_key(cid), {})[date_str] = {"status": status, "bunkedClasses": 0}

    elif status == BUNKING:
        if date_str in global_marks:
            raise ValidationError("휴일/시험으로 표시된 날짜입니다. 먼저 표시를 해제해주세요.")
        count = _validate_bunk_count(bunked_classes, count_for(course_id))
        calendar.setdefault(subject_key(course_id), {})[date_str] = {
            "status": BUNKING if count > 0 else ATTENDING,
            "bunkedClasses": count,
        }

    else:
        if global_marks.pop(date_str, None) is not None:
            # 다른 과목에 전파된 휴일/시험 기록도 함께 해제
            for cid in _tracked_courses(semester, course_id):
                record = calendar.get(subject_key(cid), {}).get(date_str)
                if record and record.get("status") in GLOBAL_STATUSES:
                    calendar[subject_key(cid)][date_str] = default_record(cid)
        calendar.setdefault(subject_key(course_id), {})[date_str] = default_record(course_id)

    store.save(calendar, global_marks)
    logger.info(f"날짜 상태 변경: {course_id} / {date_str} -> {status}")

    return resolve_day(
        day, count_for(course_id), True,
        store.subject_records(course_id, calendar).get(date_str), global_marks.get(date_str),
    )


def toggle_day_mark(storage, course_id, day, mark, today=None):
    """휴일/시험 표시 모드 클릭 - 이미 같은 표시면 해제, 아니면 표시"""
    if mark not in GLOBAL_STATUSES:
        raise ValidationError(f"휴일 또는 시험만 표시할 수 있습니다: {mark}")

    day = parse_date(day)
    current = calendar_for_course(storage, course_id, day, day)
    if current and current[0].status == mark:
        return apply_day_edit(storage, course_id, day, NORMAL, today=today)
    return apply_day_edit(storage, course_id, day, mark, today=today)
