"""
CanIBunk - 라우트 정의
"""
import logging
from flask import Blueprint, jsonify, request

from models import NotFoundError
from utils.error_handlers import handle_errors

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("요청 데이터가 없습니다.")
    return data


def _int_arg(name):
    value = request.args.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"정수가 아닌 값입니다: {name}={value}")


# ===== 상태 =====

@api_bp.route('/health', methods=['GET'])
@handle_errors
def health():
    from services.storage_service import get_storage
    storage = get_storage()
    return jsonify({"success": True, "storage": getattr(storage, 'name', type(storage).__name__)})


# ===== 시간표 =====

@api_bp.route('/timetable', methods=['GET'])
@handle_errors
def get_timetable():
    from services.storage_service import get_storage
    from services.state_service import load_timetable
    timetable = load_timetable(get_storage())
    return jsonify({"success": True, "timetable": timetable.to_dict() if timetable else None})


@api_bp.route('/timetable', methods=['PUT'])
@handle_errors
def put_timetable():
    """시간표 검증 후 저장"""
    from services.storage_service import get_storage
    from services.state_service import save_timetable
    from services.setup_service import build_timetable
    timetable = build_timetable(_json_body())
    save_timetable(get_storage(), timetable)
    return jsonify({
        "success": True,
        "message": "시간표가 저장되었습니다.",
        "courses": timetable.course_ids(),
    })


@api_bp.route('/timetable/slots', methods=['POST'])
@handle_errors
def preview_slots():
    """근무 요일/시간 설정으로 빈 슬롯 목록 생성 (저장하지 않음)"""
    from config import Config
    from services.setup_service import generate_time_slots
    data = request.get_json(silent=True) or {}
    slots = generate_time_slots(
        working_days=data.get('workingDays', Config.DEFAULT_WORKING_DAYS),
        start_time=data.get('startTime', Config.DEFAULT_START_TIME),
        end_time=data.get('endTime', Config.DEFAULT_END_TIME),
        class_duration=data.get('classDuration', Config.DEFAULT_CLASS_DURATION),
        break_start=data.get('breakStart', Config.DEFAULT_BREAK_START),
        break_end=data.get('breakEnd', Config.DEFAULT_BREAK_END),
        lunch_start=data.get('lunchStart', Config.DEFAULT_LUNCH_START),
        lunch_end=data.get('lunchEnd', Config.DEFAULT_LUNCH_END),
    )
    return jsonify({"success": True, "timeSlots": [s.to_dict() for s in slots]})


def _stored_timetable(storage):
    from services.state_service import load_timetable
    timetable = load_timetable(storage)
    if timetable is None:
        raise ValueError("시간표가 설정되지 않았습니다.")
    return timetable


@api_bp.route('/timetable/slots/<int:index>', methods=['PUT'])
@handle_errors
def put_slot_course(index):
    """저장된 시간표의 슬롯에 과목 지정 {courseId} (비우면 공강)"""
    from services.storage_service import get_storage
    from services.state_service import save_timetable
    from services.setup_service import assign_course
    data = _json_body()
    course_id = data.get('courseId') or None
    if course_id is not None and not isinstance(course_id, str):
        raise ValueError("과목 ID는 문자열이어야 합니다.")
    storage = get_storage()
    timetable = assign_course(_stored_timetable(storage), index, course_id)
    save_timetable(storage, timetable)
    return jsonify({
        "success": True,
        "slot": timetable.time_slots[index].to_dict(),
        "courses": timetable.course_ids(),
    })


@api_bp.route('/timetable/courses/<course_id>', methods=['DELETE'])
@handle_errors
def delete_timetable_course(course_id):
    """과목 삭제 - 해당 과목이 지정된 슬롯도 함께 제거"""
    from services.storage_service import get_storage
    from services.state_service import save_timetable
    from services.setup_service import remove_course
    storage = get_storage()
    timetable = _stored_timetable(storage)
    if course_id not in timetable.course_ids():
        raise NotFoundError(f"시간표에 없는 과목입니다: {course_id}")
    save_timetable(storage, remove_course(timetable, course_id))
    return jsonify({
        "success": True,
        "message": "과목이 삭제되었습니다.",
        "courses": timetable.course_ids(),
    })


# ===== 학기 =====

@api_bp.route('/semester', methods=['GET'])
@handle_errors
def get_semester():
    from services.storage_service import get_storage
    from services.state_service import load_semester
    semester = load_semester(get_storage())
    return jsonify({"success": True, "semester": semester.to_dict() if semester else None})


@api_bp.route('/semester', methods=['PUT'])
@handle_errors
def put_semester():
    """학기 검증 후 저장"""
    from services.storage_service import get_storage
    from services.state_service import save_semester
    from services.setup_service import build_semester
    semester = build_semester(_json_body())
    save_semester(get_storage(), semester)
    return jsonify({"success": True, "message": "학기 정보가 저장되었습니다."})


@api_bp.route('/semester/courses', methods=['GET'])
@handle_errors
def get_semester_courses():
    """시간표 기준 과목 목록 (기존 기준 출석값 병합)"""
    from services.storage_service import get_storage
    from services.state_service import load_timetable, load_semester
    from services.setup_service import courses_from_timetable
    storage = get_storage()
    timetable = load_timetable(storage)
    if timetable is None:
        return jsonify({"success": True, "courses": []})
    courses = courses_from_timetable(timetable, load_semester(storage))
    return jsonify({"success": True, "courses": [c.to_dict() for c in courses]})


@api_bp.route('/courses/<course_id>/baseline', methods=['PUT'])
@handle_errors
def put_baseline(course_id):
    from services.storage_service import get_storage
    from services.state_service import load_semester, save_semester
    from services.setup_service import update_course_baseline
    data = _json_body()
    storage = get_storage()
    semester = load_semester(storage)
    if semester is None:
        raise ValueError("학기 정보가 설정되지 않았습니다.")
    course = update_course_baseline(
        semester, course_id, data.get('totalClasses'), data.get('attendedClasses')
    )
    save_semester(storage, semester)
    return jsonify({"success": True, "course": course.to_dict()})


# ===== 캘린더 =====

@api_bp.route('/courses/<course_id>/calendar', methods=['GET'])
@handle_errors
def get_calendar(course_id):
    """과목 캘린더 (start/end 또는 year/month, 생략 시 학기 전체)"""
    from services.storage_service import get_storage
    from services.state_service import load_semester
    from services.calendar_service import (
        calendar_for_course, month_grid_range, shift_month, initial_month,
        month_in_semester, clamp_to_semester,
    )
    storage = get_storage()
    semester = load_semester(storage)
    if semester is None:
        return jsonify({"success": True, "days": []})

    result = {"success": True}
    year, month = _int_arg('year'), _int_arg('month')
    if year is not None or month is not None:
        if year is None or month is None or not 1 <= month <= 12:
            raise ValueError("year 와 month(1~12)를 함께 지정해주세요.")
        if not month_in_semester(semester, year, month):
            raise ValueError(f"학기 기간 밖의 월입니다: {year}-{month:02d}")
        start, end = month_grid_range(semester, year, month)
        result["month"] = {"year": year, "month": month}
        result["prev"] = dict(zip(("year", "month"), shift_month(semester, year, month, -1)))
        result["next"] = dict(zip(("year", "month"), shift_month(semester, year, month, 1)))
    else:
        start, end = clamp_to_semester(
            semester,
            request.args.get('start') or semester.start_date,
            request.args.get('end') or semester.end_date,
        )
        result["initialMonth"] = dict(zip(("year", "month"), initial_month(semester)))

    days = calendar_for_course(storage, course_id, start, end)
    result["days"] = [d.to_dict() for d in days]
    return jsonify(result)


@api_bp.route('/courses/<course_id>/days/<day>', methods=['PUT'])
@handle_errors
def put_day(course_id, day):
    """날짜 상태 변경 {status, bunkedClasses}"""
    from services.storage_service import get_storage
    from services.calendar_service import apply_day_edit
    data = _json_body()
    result = apply_day_edit(
        get_storage(), course_id, day,
        data.get('status'), data.get('bunkedClasses', 0),
    )
    return jsonify({"success": True, "day": result.to_dict()})


@api_bp.route('/courses/<course_id>/days/<day>/toggle', methods=['POST'])
@handle_errors
def toggle_day(course_id, day):
    """휴일/시험 표시 토글 {mark}"""
    from services.storage_service import get_storage
    from services.calendar_service import toggle_day_mark
    data = _json_body()
    result = toggle_day_mark(get_storage(), course_id, day, data.get('mark'))
    return jsonify({"success": True, "day": result.to_dict()})


# ===== 통계 =====

@api_bp.route('/courses/<course_id>/attendance', methods=['GET'])
@handle_errors
def get_attendance(course_id):
    from services.storage_service import get_storage
    from services.attendance_service import attendance_for_course
    summary = attendance_for_course(get_storage(), course_id)
    return jsonify({"success": True, "attendance": summary.to_dict()})


@api_bp.route('/courses/<course_id>/smart-bunk', methods=['GET'])
@handle_errors
def get_smart_bunk(course_id):
    """목표 출석률 기준 추가 번크 가능 수업 수"""
    from config import Config
    from services.storage_service import get_storage
    from services.attendance_service import attendance_for_course, compute_smart_bunk
    target = request.args.get('target', Config.DEFAULT_TARGET_PERCENTAGE)
    summary = attendance_for_course(get_storage(), course_id)
    budget = compute_smart_bunk(summary, target)
    return jsonify({
        "success": True,
        "target": float(target),
        "budget": budget,
        "predictedPct": round(summary.predicted_percentage, 2),
    })


# ===== 초기화 =====

@api_bp.route('/reset/<scope>', methods=['POST'])
@handle_errors
def reset(scope):
    from services.storage_service import get_storage
    from services.state_service import RESET_ACTIONS
    action = RESET_ACTIONS.get(scope)
    if action is None:
        raise NotFoundError(f"알 수 없는 초기화 범위입니다: {scope}")
    action(get_storage())
    logger.info(f"초기화 요청 처리: {scope}")
    return jsonify({"success": True, "message": "초기화되었습니다.", "scope": scope})
