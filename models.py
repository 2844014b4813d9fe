"""
CanIBunk - 데이터 모델
"""
from dataclasses import dataclass, field
from typing import List, Optional


# 날짜 상태
ATTENDING = 'attending'
BUNKING = 'bunking'
HOLIDAY = 'holiday'
EXAM = 'exam'
NORMAL = 'normal'

DAY_STATUSES = (ATTENDING, BUNKING, HOLIDAY, EXAM, NORMAL)
GLOBAL_STATUSES = (HOLIDAY, EXAM)     # 모든 과목에 동시에 적용되는 표시
ZERO_BUNK_STATUSES = (HOLIDAY, EXAM, NORMAL)

# 일요일 시작 요일 이름 (인덱스 0~6)
WEEKDAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


class ValidationError(ValueError):
    """사용자 입력 검증 실패 (상태는 변경되지 않음)"""


class NotFoundError(Exception):
    """요청한 과목/범위가 존재하지 않음"""


def _to_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Course:
    """과목 및 출석 기준값"""
    id: str                    # "CS101"
    name: str = ""
    color: str = "#FF6B6B"
    total_classes: int = 0     # 추적 시작 전까지의 총 수업 수
    attended_classes: int = 0  # 추적 시작 전까지의 출석 수업 수

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "totalClasses": self.total_classes,
            "attendedClasses": self.attended_classes,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or str(data.get("id", "")),
            color=data.get("color") or "#FF6B6B",
            total_classes=_to_int(data.get("totalClasses")),
            attended_classes=_to_int(data.get("attendedClasses")),
        )


@dataclass
class TimeSlot:
    """주간 반복 수업 시간"""
    day: str                          # "Tuesday"
    start_time: str                   # "09:00"
    end_time: str                     # "10:00"
    course_id: Optional[str] = None   # 없으면 공강

    def to_dict(self):
        d = {
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }
        if self.course_id:
            d["courseId"] = self.course_id
        return d

    @classmethod
    def from_dict(cls, data):
        return cls(
            day=data.get("day", ""),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            course_id=data.get("courseId") or None,
        )


@dataclass
class Timetable:
    """주간 시간표"""
    working_days: List[str] = field(default_factory=list)
    start_time: str = "09:00"
    end_time: str = "17:00"
    class_duration: int = 60
    break_start: str = "11:00"
    break_end: str = "11:15"
    lunch_start: str = "13:00"
    lunch_end: str = "14:00"
    time_slots: List[TimeSlot] = field(default_factory=list)

    def class_count(self, weekday, course_id):
        """해당 요일에 과목 수업이 몇 개인지 (workingDays와 무관)"""
        return sum(1 for slot in self.time_slots
                   if slot.day == weekday and slot.course_id == course_id)

    def course_ids(self):
        """슬롯 순서대로 중복 없는 과목 ID 목록"""
        seen = []
        for slot in self.time_slots:
            if slot.course_id and slot.course_id not in seen:
                seen.append(slot.course_id)
        return seen

    def to_dict(self):
        return {
            "workingDays": list(self.working_days),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "classDuration": self.class_duration,
            "breakStart": self.break_start,
            "breakEnd": self.break_end,
            "lunchStart": self.lunch_start,
            "lunchEnd": self.lunch_end,
            "timeSlots": [s.to_dict() for s in self.time_slots],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            working_days=list(data.get("workingDays") or []),
            start_time=data.get("startTime", "09:00"),
            end_time=data.get("endTime", "17:00"),
            class_duration=_to_int(data.get("classDuration"), 60),
            break_start=data.get("breakStart", "11:00"),
            break_end=data.get("breakEnd", "11:15"),
            lunch_start=data.get("lunchStart", "13:00"),
            lunch_end=data.get("lunchEnd", "14:00"),
            time_slots=[TimeSlot.from_dict(s) for s in data.get("timeSlots") or []],
        )


@dataclass
class Semester:
    """학기 기간과 추적 과목"""
    start_date: str                 # "2024-01-01"
    end_date: str                   # "2024-05-31"
    courses: List[Course] = field(default_factory=list)
    selected_courses: List[str] = field(default_factory=list)

    def get_course(self, course_id):
        for course in self.courses:
            if course.id == course_id:
                return course
        return None

    def to_dict(self):
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "courses": [c.to_dict() for c in self.courses],
            "selectedCourses": list(self.selected_courses),
            # 구버전 호환
            "selectedCourse": self.selected_courses[0] if self.selected_courses else "",
        }

    @classmethod
    def from_dict(cls, data):
        data = normalize_semester_document(data)
        return cls(
            start_date=data["startDate"],
            end_date=data["endDate"],
            courses=[Course.from_dict(c) for c in data["courses"]],
            selected_courses=list(data["selectedCourses"]),
        )


def normalize_semester_document(data):
    """저장된 학기 문서를 현재 스키마로 변환 (입력은 변경하지 않음)

    - 단일 ``selectedCourse`` 필드만 있는 구버전 문서는 한 원소 목록으로 변환
    - 과목 숫자 필드 누락 시 0, 음수는 0, attendedClasses는 totalClasses 이하로 제한
    - 선택 목록이 비어 있으면 전체 과목을 추적
    """
    courses = []
    for raw in data.get("courses") or []:
        total = max(0, _to_int(raw.get("totalClasses")))
        attended = min(max(0, _to_int(raw.get("attendedClasses"))), total)
        courses.append({**raw, "totalClasses": total, "attendedClasses": attended})

    known_ids = [str(c.get("id", "")) for c in courses]
    selected = data.get("selectedCourses")
    if selected is None:
        legacy = data.get("selectedCourse")
        selected = [legacy] if legacy else []
    selected = [cid for cid in selected if cid in known_ids]
    if not selected:
        selected = known_ids

    return {
        "startDate": data.get("startDate", ""),
        "endDate": data.get("endDate", ""),
        "courses": courses,
        "selectedCourses": selected,
    }


@dataclass
class DayRecord:
    """과목별 날짜 기록"""
    status: str = ATTENDING
    bunked_classes: int = 0

    def to_dict(self):
        return {"status": self.status, "bunkedClasses": self.bunked_classes}

    @classmethod
    def from_dict(cls, data):
        status = data.get("status")
        return cls(
            status=status if status in DAY_STATUSES else NORMAL,
            bunked_classes=max(0, _to_int(data.get("bunkedClasses"))),
        )


@dataclass
class CalendarDay:
    """계산된 날짜 뷰 (저장하지 않음)"""
    date: str
    status: str
    class_count: int = 0
    bunked_classes: int = 0

    def to_dict(self):
        return {
            "date": self.date,
            "status": self.status,
            "classCount": self.class_count,
            "bunkedClasses": self.bunked_classes,
        }


@dataclass
class AttendanceSummary:
    """과목별 출석 통계"""
    current_percentage: float = 0.0
    predicted_percentage: float = 0.0
    total_classes: int = 0
    attended_classes: int = 0
    total_past_classes: int = 0
    attended_past_classes: int = 0
    total_future_classes: int = 0
    bunked_future_classes: int = 0

    def to_dict(self):
        return {
            "currentPct": round(self.current_percentage, 2),
            "predictedPct": round(self.predicted_percentage, 2),
            "totalClasses": self.total_classes,
            "attendedClasses": self.attended_classes,
            "totalPastClasses": self.total_past_classes,
            "attendedPastClasses": self.attended_past_classes,
            "totalFutureClasses": self.total_future_classes,
            "bunkedFutureClasses": self.bunked_future_classes,
        }
