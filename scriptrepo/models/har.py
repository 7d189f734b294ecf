"""
HAR 데이터 모델 모듈

브라우저가 기록한 HTTP Archive 문서 중 스크립트 생성에 필요한 부분을 정의합니다.
알 수 없는 필드는 그대로 보존되어 정리된 HAR 출력에 다시 포함됩니다.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HarModel(BaseModel):
    """HAR 모델 공통 설정"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class HarHeader(HarModel):
    """HAR 헤더 (이름/값 쌍)"""

    name: str
    value: str = ""


class HarParam(HarModel):
    """HAR POST 파라미터"""

    name: str
    value: Optional[str] = None


class HarPostData(HarModel):
    """HAR POST 데이터"""

    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    params: Optional[List[HarParam]] = None
    text: Optional[str] = None


class HarRequest(HarModel):
    """HAR 요청"""

    method: str = "GET"
    url: str
    headers: List[HarHeader] = Field(default_factory=list)
    post_data: Optional[HarPostData] = Field(default=None, alias="postData")


class HarResponse(HarModel):
    """HAR 응답"""

    status: int = 0
    headers: List[HarHeader] = Field(default_factory=list)


class HarEntry(HarModel):
    """HAR 엔트리 (요청/응답 한 쌍)"""

    request: HarRequest
    response: HarResponse = Field(default_factory=HarResponse)


class HarLog(HarModel):
    """HAR 로그"""

    entries: List[HarEntry] = Field(default_factory=list)


class Har(HarModel):
    """HAR 문서"""

    log: HarLog = Field(default_factory=HarLog)


class Request(BaseModel):
    """스크립트 템플릿에 전달되는 요청 정보"""

    method: str
    url: str
    state: int = Field(default=0, description="응답 상태 코드")
    headers: Dict[str, str] = Field(default_factory=dict)
    post_data: Optional[Dict[str, Optional[str]]] = None
