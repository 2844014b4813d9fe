from datetime import date, timedelta

import pytest

from services.storage_service import LocalJsonStorage, set_storage, reset_storage
from services.state_service import save_timetable, save_semester
from models import Timetable, Semester


def _slot(day, start, end, course_id=None):
    slot = {"day": day, "startTime": start, "endTime": end}
    if course_id:
        slot["courseId"] = course_id
    return slot


@pytest.fixture
def storage(tmp_path):
    """Provide a JSON key-value store in a temporary directory."""
    return LocalJsonStorage(str(tmp_path / "store.json"))


@pytest.fixture
def timetable_doc():
    """CS101 on Tue/Wed (1 each), MA201 three times on Monday and once on Tuesday."""
    return {
        "workingDays": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        "timeSlots": [
            _slot("Monday", "09:00", "10:00", "MA201"),
            _slot("Monday", "10:00", "11:00", "MA201"),
            _slot("Monday", "11:15", "12:15", "MA201"),
            _slot("Tuesday", "09:00", "10:00", "CS101"),
            _slot("Tuesday", "10:00", "11:00", "MA201"),
            _slot("Wednesday", "09:00", "10:00", "CS101"),
            _slot("Thursday", "09:00", "10:00"),
        ],
    }


@pytest.fixture
def semester_doc():
    return {
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
        "courses": [
            {"id": "CS101", "name": "Intro to CS", "color": "#FF6B6B",
             "totalClasses": 20, "attendedClasses": 15},
            {"id": "MA201", "name": "Linear Algebra", "color": "#4ECDC4",
             "totalClasses": 10, "attendedClasses": 9},
        ],
        "selectedCourses": ["CS101", "MA201"],
    }


@pytest.fixture
def seeded(storage, timetable_doc, semester_doc):
    """Storage holding the January 2024 timetable and semester."""
    save_timetable(storage, Timetable.from_dict(timetable_doc))
    save_semester(storage, Semester.from_dict(semester_doc))
    return storage


@pytest.fixture
def client(storage):
    from app import create_app
    set_storage(storage)
    app = create_app()
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    reset_storage()


@pytest.fixture
def live_setup():
    """Setup payloads around the real current date: one CS101 class every day."""
    today = date.today()
    days = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    timetable = {
        "workingDays": days,
        "timeSlots": [_slot(d, "09:00", "10:00", "CS101") for d in days],
    }
    semester = {
        "startDate": (today - timedelta(days=14)).isoformat(),
        "endDate": (today + timedelta(days=27)).isoformat(),
        "courses": [{"id": "CS101", "name": "Intro to CS",
                     "totalClasses": 10, "attendedClasses": 8}],
    }
    return {"today": today, "timetable": timetable, "semester": semester}
