"""
시간표/학기 설정 서비스
"""
import re
import logging
from datetime import datetime, timedelta

from config import Config
from models import Course, TimeSlot, Timetable, Semester, ValidationError, NotFoundError, WEEKDAY_NAMES
from services.calendar_service import parse_date

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
HEX_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')


def _parse_time(value, field_name):
    """"HH:MM" → 기준일(2000-01-01) datetime"""
    if not value or not TIME_RE.match(value):
        raise ValidationError(f"시간 형식이 올바르지 않습니다. (HH:MM): {field_name}")
    h, m = map(int, value.split(':'))
    return datetime(2000, 1, 1, h, m)


def _validate_days(days):
    unknown = [d for d in days if d not in WEEKDAY_NAMES]
    if unknown:
        raise ValidationError(f"알 수 없는 요일입니다: {', '.join(unknown)}")


def generate_time_slots(working_days=None, start_time=Config.DEFAULT_START_TIME,
                        end_time=Config.DEFAULT_END_TIME,
                        class_duration=Config.DEFAULT_CLASS_DURATION,
                        break_start=Config.DEFAULT_BREAK_START, break_end=Config.DEFAULT_BREAK_END,
                        lunch_start=Config.DEFAULT_LUNCH_START, lunch_end=Config.DEFAULT_LUNCH_END):
    """근무 요일마다 class_duration 분 단위 빈 슬롯 생성 (쉬는 시간/점심 시간 제외)"""
    if working_days is None:
        working_days = Config.DEFAULT_WORKING_DAYS
    _validate_days(working_days)

    if isinstance(class_duration, bool) or not isinstance(class_duration, int) or class_duration <= 0:
        raise ValidationError("수업 시간(분)은 1 이상의 정수여야 합니다.")

    start = _parse_time(start_time, 'startTime')
    end = _parse_time(end_time, 'endTime')
    b_start = _parse_time(break_start, 'breakStart')
    b_end = _parse_time(break_end, 'breakEnd')
    l_start = _parse_time(lunch_start, 'lunchStart')
    l_end = _parse_time(lunch_end, 'lunchEnd')
    step = timedelta(minutes=class_duration)

    slots = []
    for day in working_days:
        current = start
        while current < end:
            in_lunch = l_start <= current < l_end
            in_break = b_start <= current < b_end
            if not in_lunch and not in_break:
                slots.append(TimeSlot(
                    day=day,
                    start_time=current.strftime('%H:%M'),
                    end_time=(current + step).strftime('%H:%M'),
                ))

            current += step
            # 쉬는 시간/점심 시간 안에 걸치면 끝나는 시각으로 이동
            if b_start <= current < b_end:
                current = b_end
            if l_start <= current < l_end:
                current = l_end

    logger.info(f"시간표 슬롯 생성: {len(working_days)}일 / {len(slots)}개")
    return slots


def build_timetable(data):
    """요청 데이터로 Timetable 생성 후 검증"""
    if not isinstance(data, dict):
        raise ValidationError("요청 데이터가 없습니다.")
    timetable = Timetable.from_dict(data)
    validate_timetable(timetable)
    return timetable


def validate_timetable(timetable):
    _validate_days(timetable.working_days)
    for slot in timetable.time_slots:
        _validate_days([slot.day])
        _parse_time(slot.start_time, 'startTime')
        _parse_time(slot.end_time, 'endTime')
    if not timetable.course_ids():
        raise ValidationError("최소 한 개의 과목을 시간표에 추가해주세요.")


def assign_course(timetable, slot_index, course_id):
    """슬롯에 과목 지정 (course_id 가 비어 있으면 공강으로)"""
    if not 0 <= slot_index < len(timetable.time_slots):
        raise ValidationError(f"존재하지 않는 슬롯입니다: {slot_index}")
    timetable.time_slots[slot_index].course_id = course_id or None
    return timetable


def remove_course(timetable, course_id):
    """과목 삭제 - 해당 과목이 지정된 슬롯도 함께 제거"""
    timetable.time_slots = [s for s in timetable.time_slots if s.course_id != course_id]
    return timetable


def courses_from_timetable(timetable, existing_semester=None):
    """시간표 슬롯에서 과목 목록 생성, 기존 학기의 기준 출석값은 유지"""
    courses = []
    for index, course_id in enumerate(timetable.course_ids()):
        course = Course(
            id=course_id,
            name=course_id,
            color=Config.COURSE_COLORS[index % len(Config.COURSE_COLORS)],
        )
        existing = existing_semester.get_course(course_id) if existing_semester else None
        if existing:
            course.total_classes = existing.total_classes
            course.attended_classes = existing.attended_classes
        courses.append(course)
    return courses


def _validate_count(value, field_name):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{field_name}은(는) 0 이상의 정수여야 합니다.")
    return value


def _validate_baseline(course_id, total, attended):
    total = _validate_count(total, 'totalClasses')
    attended = _validate_count(attended, 'attendedClasses')
    if attended > total:
        raise ValidationError(f"출석 수업 수가 총 수업 수보다 많습니다: {course_id}")
    return total, attended


def _course_from_request(raw, index):
    if not isinstance(raw, dict):
        raise ValidationError("과목 정보 형식이 올바르지 않습니다.")
    raw_id = raw.get('id')
    if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int)):
        raise ValidationError("과목 ID가 비어 있거나 형식이 올바르지 않습니다.")
    course_id = str(raw_id).strip()
    name = raw.get('name')
    if name is not None and not isinstance(name, str):
        raise ValidationError(f"과목 이름은 문자열이어야 합니다: {course_id}")
    color = raw.get('color')
    if not isinstance(color, str) or not HEX_COLOR_RE.match(color):
        color = Config.COURSE_COLORS[index % len(Config.COURSE_COLORS)]
    return Course(
        id=course_id,
        name=(name or course_id).strip()[:50],
        color=color,
        total_classes=raw.get('totalClasses', 0),
        attended_classes=raw.get('attendedClasses', 0),
    )


def build_semester(data):
    """요청 데이터로 Semester 생성 후 검증

    selectedCourses 가 없으면 구버전 selectedCourse, 그것도 없으면 전체 과목.
    """
    if not isinstance(data, dict):
        raise ValidationError("요청 데이터가 없습니다.")

    start_date, end_date = data.get('startDate') or '', data.get('endDate') or ''
    if not isinstance(start_date, str) or not isinstance(end_date, str):
        raise ValidationError("날짜 형식이 올바르지 않습니다. (YYYY-MM-DD)")

    raw_courses = data.get('courses') or []
    if not isinstance(raw_courses, list):
        raise ValidationError("과목 목록 형식이 올바르지 않습니다.")
    courses = [_course_from_request(raw, i) for i, raw in enumerate(raw_courses)]

    selected = data.get('selectedCourses')
    if selected is None:
        legacy = data.get('selectedCourse')
        selected = [legacy] if legacy else []
    if not isinstance(selected, list) or not all(isinstance(cid, str) for cid in selected):
        raise ValidationError("선택 과목 목록 형식이 올바르지 않습니다.")

    semester = Semester(
        start_date=start_date.strip(),
        end_date=end_date.strip(),
        courses=courses,
        selected_courses=list(dict.fromkeys(selected)) or [c.id for c in courses],
    )
    validate_semester(semester)
    semester.start_date = parse_date(semester.start_date).isoformat()
    semester.end_date = parse_date(semester.end_date).isoformat()
    return semester


def validate_semester(semester):
    """학기 검증 - 기간, 과목 ID 중복, 기준 출석값, 선택 과목"""
    if not semester.start_date or not semester.end_date:
        raise ValidationError("학기 시작일과 종료일을 입력해주세요.")
    if parse_date(semester.start_date) > parse_date(semester.end_date):
        raise ValidationError("학기 시작일이 종료일보다 늦습니다.")

    if not semester.courses:
        raise ValidationError("최소 한 개의 과목이 필요합니다.")
    seen = set()
    for course in semester.courses:
        if not course.id:
            raise ValidationError("과목 ID가 비어 있습니다.")
        if course.id in seen:
            raise ValidationError(f"중복된 과목 ID입니다: {course.id}")
        seen.add(course.id)
        _validate_baseline(course.id, course.total_classes, course.attended_classes)

    unknown = [cid for cid in semester.selected_courses if cid not in seen]
    if unknown:
        raise ValidationError(f"알 수 없는 과목입니다: {', '.join(unknown)}")


def update_course_baseline(semester, course_id, total_classes, attended_classes):
    """과목 기준 출석값 수정"""
    course = semester.get_course(course_id)
    if course is None:
        raise NotFoundError(f"과목을 찾을 수 없습니다: {course_id}")
    course.total_classes, course.attended_classes = _validate_baseline(
        course_id, total_classes, attended_classes
    )
    logger.info(f"기준 출석값 수정: {course_id} ({course.attended_classes}/{course.total_classes})")
    return course
