import os

class Config:
    """애플리케이션 설정"""

    # 보안
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'canibunk-secret-key'

    # 로컬 JSON 저장 (Cosmos DB fallback)
    DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
    STORE_FILE = os.path.join(DATA_DIR, 'canibunk.json')

    # Azure Cosmos DB
    COSMOS_DB_ENDPOINT = os.environ.get('COSMOS_DB_ENDPOINT')
    COSMOS_DB_KEY = os.environ.get('COSMOS_DB_KEY')
    COSMOS_DATABASE_NAME = 'CanIBunkDB'
    COSMOS_CONTAINER_NAME = 'TrackerDocuments'

    # 저장 문서 키
    TIMETABLE_KEY = 'timetable'
    SEMESTER_KEY = 'semester'
    CALENDAR_KEY = 'calendar'
    GLOBAL_STATUS_KEY = 'global-status'

    # 시간표 기본값
    DEFAULT_WORKING_DAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']
    DEFAULT_START_TIME = '09:00'
    DEFAULT_END_TIME = '17:00'
    DEFAULT_CLASS_DURATION = 60  # 분
    DEFAULT_BREAK_START = '11:00'
    DEFAULT_BREAK_END = '11:15'
    DEFAULT_LUNCH_START = '13:00'
    DEFAULT_LUNCH_END = '14:00'

    # 목표 출석률 (스마트 번크 계산)
    DEFAULT_TARGET_PERCENTAGE = 75
    MIN_TARGET_PERCENTAGE = 60
    MAX_TARGET_PERCENTAGE = 100

    # 과목 색상 프리셋
    COURSE_COLORS = [
        '#FF6B6B',  # Coral
        '#4ECDC4',  # Turquoise
        '#45B7D1',  # Sky Blue
        '#96CEB4',  # Sage
        '#FFEAA7',  # Cream
        '#DDA0DD',  # Plum
        '#98D8C8',  # Mint
        '#F7DC6F',  # Mustard
        '#BB8FCE',  # Lavender
        '#85C1E9',  # Light Blue
    ]

    # 로그
    LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # 서버
    HOST = '0.0.0.0'
    PORT = int(os.environ.get('PORT', 5000))
    DEBUG = os.environ.get('FLASK_ENV') == 'development'

    @classmethod
    def use_cosmos_db(cls):
        """Cosmos DB 사용 여부 판단"""
        return bool(cls.COSMOS_DB_ENDPOINT and cls.COSMOS_DB_KEY)
