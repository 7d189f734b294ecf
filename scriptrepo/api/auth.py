"""
JWT 기반 인증 모듈

API 액세스를 위한 JWT 토큰 기반 사용자 인증과 권한 확인을 제공합니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config.settings import Settings, get_settings
from ..exceptions import AuthenticationException
from ..models.base import User
from ..models.enums import Role
from ..utils.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer 토큰 스키마
security = HTTPBearer()

# 운영 기능에 접근 가능한 권한
OPERATOR_ROLES = (Role.ADMIN, Role.SUPER_USER)


class AuthManager:
    """JWT 인증 관리자"""

    def __init__(self, settings: Settings):
        """
        인증 관리자 초기화

        Args:
            settings: 시스템 설정 객체
        """
        self.settings = settings
        self.logger = logger
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm

    def create_access_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        """
        액세스 토큰 생성

        Args:
            user: 토큰을 발급할 사용자
            expires_delta: 만료 시간 (기본값: 설정에서 가져옴)

        Returns:
            JWT 토큰 문자열

        Raises:
            AuthenticationException: 토큰 생성 실패 시
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(hours=self.settings.jwt_expires_hours))

        to_encode = {
            "sub": user.user_id,
            "user_name": user.user_name,
            "role": user.role.value,
            "exp": expire,
            "iat": now,
            "type": "access"
        }

        try:
            encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        except jwt.PyJWTError as e:
            self.logger.error(f"토큰 생성 실패: {user.user_id}, {e}")
            raise AuthenticationException(f"토큰 생성 실패: {e}") from e

        self.logger.info(f"액세스 토큰 생성: {user.user_id} ({user.role.value})")
        return encoded_jwt

    def verify_token(self, token: str) -> User:
        """
        토큰 검증

        Args:
            token: JWT 토큰

        Returns:
            토큰에 담긴 사용자

        Raises:
            HTTPException: 토큰이 유효하지 않을 때
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            self.logger.warning("만료된 토큰으로 접근 시도")
            raise _unauthorized("토큰이 만료되었습니다")
        except jwt.PyJWTError as e:
            self.logger.warning(f"JWT 검증 실패: {e}")
            raise _unauthorized("토큰을 검증할 수 없습니다")

        if payload.get("type") != "access":
            self.logger.warning(f"잘못된 토큰 타입: {payload.get('type')}")
            raise _unauthorized("잘못된 토큰 타입입니다")

        user_id = payload.get("sub")
        if not user_id:
            self.logger.warning("토큰에 사용자 ID가 없습니다")
            raise _unauthorized("토큰에 사용자 ID가 없습니다")

        try:
            role = Role(payload.get("role", Role.USER.value))
        except ValueError:
            raise _unauthorized("알 수 없는 사용자 권한입니다")

        return User(user_id=user_id, user_name=payload.get("user_name") or user_id, role=role)

    def resolve_user(self, user_id: str, user_name: Optional[str] = None) -> User:
        """
        토큰 발급 대상 사용자 생성

        설정의 관리자 ID 목록에 있으면 관리자 권한을, 그 외에는 일반 사용자 권한을 부여합니다.

        Args:
            user_id: 사용자 ID
            user_name: 사용자 이름 (없으면 ID 사용)

        Returns:
            사용자
        """
        role = Role.ADMIN if user_id in self.settings.admin_user_ids else Role.USER
        return User(user_id=user_id, user_name=user_name or user_id, role=role)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_auth_manager(settings: Settings = Depends(get_settings)) -> AuthManager:
    """인증 관리자 의존성 함수"""
    return AuthManager(settings)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_manager: AuthManager = Depends(get_auth_manager)
) -> User:
    """
    현재 사용자 의존성 함수

    Args:
        credentials: HTTP 인증 정보
        auth_manager: 인증 관리자

    Returns:
        인증된 사용자
    """
    return auth_manager.verify_token(credentials.credentials)


def require_operator(user: User = Depends(get_current_user)) -> User:
    """
    관리자(A) 또는 슈퍼 유저(S) 권한 확인 의존성 함수

    Raises:
        HTTPException: 권한이 없을 때 (403)
    """
    if user.role not in OPERATOR_ROLES:
        logger.warning(f"권한 없는 운영 기능 접근: {user.user_id} ({user.role.value})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="관리자 권한이 필요합니다"
        )
    return user
