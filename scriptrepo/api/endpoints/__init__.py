"""
API 엔드포인트 라우터 패키지
"""
