"""
예외 클래스 정의 모듈

스크립트 저장소 시스템에서 사용되는 커스텀 예외들을 정의합니다.
"""

from typing import Optional


class ScriptRepositorySystemException(Exception):
    """스크립트 저장소 시스템 기본 예외 클래스"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        """
        예외 초기화

        Args:
            message: 오류 메시지
            error_code: 오류 코드 (선택사항)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class PreconditionException(ScriptRepositorySystemException):
    """필수 입력값이 누락되었거나 잘못되었을 때 발생하는 예외"""

    def __init__(self, field_name: str, error_detail: str = "값이 비어 있습니다"):
        """
        사전 조건 예외 초기화

        Args:
            field_name: 검증에 실패한 필드 이름
            error_detail: 오류 상세 정보
        """
        message = f"사전 조건 위반: {field_name} - {error_detail}"
        super().__init__(message, "PRECONDITION_FAILED")
        self.field_name = field_name
        self.error_detail = error_detail


class FileEntryException(ScriptRepositorySystemException):
    """파일 엔트리 작업 중 저장소 오류가 발생했을 때의 예외"""

    def __init__(self, operation: str, path: Optional[str], error_detail: str):
        """
        파일 엔트리 예외 초기화

        Args:
            operation: 실패한 작업 이름
            path: 대상 경로
            error_detail: 오류 상세 정보
        """
        path_info = f" ({path})" if path else ""
        message = f"파일 엔트리 작업 실패: {operation}{path_info} - {error_detail}"
        super().__init__(message, "FILE_ENTRY_ERROR")
        self.operation = operation
        self.path = path
        self.error_detail = error_detail


class RepositoryProvisionException(ScriptRepositorySystemException):
    """사용자 저장소 생성 실패 시 발생하는 예외"""

    def __init__(self, user_id: str, error_detail: str):
        """
        저장소 생성 예외 초기화

        Args:
            user_id: 사용자 ID
            error_detail: 오류 상세 정보
        """
        message = f"사용자 저장소 생성 실패: {user_id} - {error_detail}"
        super().__init__(message, "REPOSITORY_PROVISION_ERROR")
        self.user_id = user_id
        self.error_detail = error_detail


class HarParseException(ScriptRepositorySystemException):
    """HAR 문서 파싱 실패 시 발생하는 예외"""

    def __init__(self, error_detail: str):
        """
        HAR 파싱 예외 초기화

        Args:
            error_detail: 오류 상세 정보
        """
        message = f"HAR 파싱 실패: {error_detail}"
        super().__init__(message, "HAR_PARSE_ERROR")
        self.error_detail = error_detail


class ScriptHandlerNotFoundException(ScriptRepositorySystemException):
    """스크립트 핸들러를 찾을 수 없을 때 발생하는 예외"""

    def __init__(self, handler_key: str):
        """
        스크립트 핸들러 찾기 실패 예외 초기화

        Args:
            handler_key: 핸들러 키
        """
        message = f"스크립트 핸들러를 찾을 수 없습니다: {handler_key}"
        super().__init__(message, "SCRIPT_HANDLER_NOT_FOUND")
        self.handler_key = handler_key


class ConfigurationException(ScriptRepositorySystemException):
    """설정 오류 시 발생하는 예외"""

    def __init__(self, config_key: str, error_detail: str):
        """
        설정 예외 초기화

        Args:
            config_key: 설정 키
            error_detail: 오류 상세 정보
        """
        message = f"설정 오류: {config_key} - {error_detail}"
        super().__init__(message, "CONFIGURATION_ERROR")
        self.config_key = config_key
        self.error_detail = error_detail


class AuthenticationException(ScriptRepositorySystemException):
    """인증 처리 실패 시 발생하는 예외"""

    def __init__(self, message: str):
        super().__init__(message, "AUTHENTICATION_ERROR")


class TemplateRenderException(ScriptRepositorySystemException):
    """스크립트 템플릿 렌더링 실패 시 발생하는 예외"""

    def __init__(self, template_key: str, error_detail: str):
        """
        템플릿 렌더링 예외 초기화

        Args:
            template_key: 템플릿 키
            error_detail: 오류 상세 정보
        """
        message = f"템플릿 렌더링 실패: {template_key} - {error_detail}"
        super().__init__(message, "TEMPLATE_RENDER_ERROR")
        self.template_key = template_key
        self.error_detail = error_detail
