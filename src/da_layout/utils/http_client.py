"""
원격 생성 이미지 다운로드용 httpx 클라이언트 팩토리

기업 프록시 환경의 인증서 문제는 DA_LAYOUT_SSL_VERIFY / DA_LAYOUT_CA_BUNDLE_PATH 로 제어합니다.
"""
import ssl

import certifi
import httpx

from da_layout.config import Settings, get_settings


def verify_option(settings: Settings) -> ssl.SSLContext | str | bool:
    """httpx `verify` 인자.

    검증 끔 → False, CA 번들 미지정 → certifi 경로,
    CA 번들 지정 → certifi 번들에 기업 CA를 추가한 컨텍스트
    """
    if not settings.ssl_verify:
        return False
    if not settings.ca_bundle_path:
        return certifi.where()

    context = ssl.create_default_context(cafile=certifi.where())
    context.load_verify_locations(cafile=settings.ca_bundle_path)
    return context


def create_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    settings = settings or get_settings()
    return httpx.AsyncClient(
        verify=verify_option(settings),
        timeout=settings.http_timeout_s,
        follow_redirects=True,
    )
