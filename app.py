"""
CanIBunk - 학기 출석 추적 및 번크 계산 API
"""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

from flask import Flask
from config import Config
from routes import api_bp


def configure_logging(config=Config):
    """루트 로거 설정 (콘솔 + 파일), 중복 호출 시 핸들러를 다시 붙이지 않음"""
    root = logging.getLogger()
    root.setLevel(config.LOG_LEVEL)
    if getattr(root, '_canibunk_configured', False):
        return

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    file_handler = logging.FileHandler(os.path.join(config.LOG_DIR, 'canibunk.log'), encoding='utf-8')
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    root._canibunk_configured = True


def create_app(config=Config):
    """Flask 애플리케이션 팩토리"""
    app = Flask(__name__)
    app.config.from_object(config)

    # 필수 디렉토리 생성
    os.makedirs(config.DATA_DIR, exist_ok=True)
    os.makedirs(config.LOG_DIR, exist_ok=True)

    configure_logging(config)

    # Blueprint 등록
    app.register_blueprint(api_bp)

    # 보안 헤더
    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        return response

    return app


# Azure WebApp 호환을 위한 전역 인스턴스
app = create_app()


def main():
    """메인 실행 함수"""
    print("=" * 50)
    print("  CanIBunk API")
    print("=" * 50)
    print(f"  http://localhost:{Config.PORT}/api/health")
    storage = "Azure Cosmos DB" if Config.use_cosmos_db() else "로컬 JSON 파일"
    print(f"  저장소: {storage}")
    print("=" * 50)

    if Config.DEBUG:
        app.run(debug=True, host=Config.HOST, port=Config.PORT)
    else:
        from waitress import serve
        print(f"Waitress 서버 시작 (포트: {Config.PORT})")
        serve(app, host=Config.HOST, port=Config.PORT)


if __name__ == '__main__':
    main()
