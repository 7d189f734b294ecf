"""
REST API 패키지

FastAPI 애플리케이션과 인증, 라우터를 제공합니다.
"""
