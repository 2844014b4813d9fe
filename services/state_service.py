"""
저장 문서 로드/저장 및 초기화 서비스

문서 4종: timetable, semester, calendar(과목별 날짜 기록), global-status(휴일/시험)
"""
import logging
from config import Config
from models import Timetable, Semester, DayRecord, GLOBAL_STATUSES

logger = logging.getLogger(__name__)


def subject_key(course_id):
    """calendar 문서 안의 과목별 키"""
    return f"subject_{course_id}"


# ===== 시간표 / 학기 =====

def load_timetable(storage):
    data = storage.get(Config.TIMETABLE_KEY)
    if not data:
        return None
    return Timetable.from_dict(data)


def save_timetable(storage, timetable):
    storage.set(Config.TIMETABLE_KEY, timetable.to_dict())
    logger.info(f"시간표 저장: 슬롯 {len(timetable.time_slots)}개")


def load_semester(storage):
    """학기 문서 로드 (구버전 selectedCourse 필드는 from_dict에서 정규화)"""
    data = storage.get(Config.SEMESTER_KEY)
    if not data:
        return None
    return Semester.from_dict(data)


def save_semester(storage, semester):
    storage.set(Config.SEMESTER_KEY, semester.to_dict())
    logger.info(f"학기 저장: {semester.start_date} ~ {semester.end_date} ({len(semester.courses)}개 과목)")


# ===== 날짜 상태 저장소 =====

class DayStatusStore:
    """과목별 날짜 기록과 전역 휴일/시험 표시

    두 문서는 항상 통째로 읽고 쓴다 (마지막 쓰기 우선).
    """

    def __init__(self, storage):
        self.storage = storage

    def load_calendar(self):
        """{"subject_<id>": {"YYYY-MM-DD": {"status", "bunkedClasses"}}}"""
        data = self.storage.get(Config.CALENDAR_KEY)
        return data if isinstance(data, dict) else {}

    def load_global(self):
        """{"YYYY-MM-DD": "holiday" | "exam"} - 그 외 값은 무시"""
        data = self.storage.get(Config.GLOBAL_STATUS_KEY)
        if not isinstance(data, dict):
            return {}
        return {d: s for d, s in data.items() if s in GLOBAL_STATUSES}

    def subject_records(self, course_id, calendar=None):
        """과목의 날짜별 DayRecord 맵"""
        if calendar is None:
            calendar = self.load_calendar()
        raw = calendar.get(subject_key(course_id)) or {}
        return {d: DayRecord.from_dict(r) for d, r in raw.items() if isinstance(r, dict)}

    def save(self, calendar, global_marks):
        self.storage.set(Config.CALENDAR_KEY, calendar)
        self.storage.set(Config.GLOBAL_STATUS_KEY, global_marks)

    def clear(self):
        self.storage.delete(Config.CALENDAR_KEY)
        self.storage.delete(Config.GLOBAL_STATUS_KEY)


# ===== 초기화 =====

def reset_attendance_baseline(storage):
    """모든 과목의 기준 출석값만 0으로 초기화"""
    semester = load_semester(storage)
    if semester is None:
        return False
    for course in semester.courses:
        course.total_classes = 0
        course.attended_classes = 0
    save_semester(storage, semester)
    logger.info("출석 기준값 초기화")
    return True


def reset_calendar_records(storage):
    """과목별 날짜 기록과 전역 휴일/시험 표시 삭제"""
    DayStatusStore(storage).clear()
    logger.info("캘린더 기록 초기화")
    return True


def reset_timetable(storage):
    storage.delete(Config.TIMETABLE_KEY)
    logger.info("시간표 초기화")
    return True


def reset_semester(storage):
    storage.delete(Config.SEMESTER_KEY)
    logger.info("학기 정보 초기화")
    return True


def reset_all(storage):
    for key in (Config.TIMETABLE_KEY, Config.SEMESTER_KEY,
                Config.CALENDAR_KEY, Config.GLOBAL_STATUS_KEY):
        storage.delete(key)
    logger.info("전체 데이터 초기화")
    return True


RESET_ACTIONS = {
    'attendance': reset_attendance_baseline,
    'calendar': reset_calendar_records,
    'timetable': reset_timetable,
    'semester': reset_semester,
    'all': reset_all,
}
