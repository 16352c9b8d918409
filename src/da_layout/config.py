from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DA_LAYOUT_",
        case_sensitive=False,
    )

    # Image Analysis
    # 분석용 다운샘플 너비 (비율 유지), 높이 하한
    sample_width: int = 420
    min_sample_height: int = 160
    # 배치 분석 타임아웃: 초과 시 정적 템플릿 배치로 fallback
    analysis_timeout_ms: int = 1200

    # Clutter / Scrim 튜닝 상수 (경험값, 구조적 의미 없음)
    clutter_variance_weight: float = 8.0
    clutter_edge_weight: float = 1.6
    scrim_clutter_threshold: float = 0.24
    scrim_contrast_threshold: float = 4.8

    # Fonts
    # 비워두면 프로젝트 루트 기준 assets/fonts/ 사용
    font_dir: str = ""

    # HTTP (원격 이미지 다운로드)
    http_timeout_s: float = 30.0
    ssl_verify: bool = True
    # 커스텀 CA 인증서 경로 (비워두면 certifi 기본값 사용)
    ca_bundle_path: str = ""

    # CLI 출력 디렉토리
    output_dir: str = "output"


@lru_cache
def get_settings() -> Settings:
    return Settings()
