"""
governctl 전역 설정 모듈

모든 전역 옵션의 기본값을 한 곳에서 관리합니다.
값은 환경변수(GOVERN_*)에서 읽고, 명령행 인자가 있으면 그 값으로 덮어씁니다.
보안을 위해 토큰은 환경변수 또는 .env 파일로 관리합니다.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel

# 프로젝트 루트의 .env 파일 로드
load_dotenv()

ENV_PREFIX = "GOVERN_"

VALID_LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


class ConfigError(ValueError):
    """설정 파일 또는 옵션이 잘못된 경우 (원격 호출 전에 중단)"""


class Config(BaseModel):
    """governctl 전역 설정"""

    dry_run: bool = False
    github_org: str = "unikraft"
    github_user: str = ""
    github_token: str = ""
    github_endpoint: str = ""
    github_skip_ssl: bool = False
    log_level: str = "info"
    no_render: bool = False
    teams_dir: str = "teams"
    repos_dir: str = "repos"
    labels_dir: str = ".github/labels"
    temp_dir: str = ""

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """
        환경변수에서 설정을 읽어 Config를 생성하는 함수

        Args:
            **overrides: 환경변수보다 우선하는 값 (None인 값은 무시)

        Returns:
            Config: 설정 객체

        Raises:
            ConfigError: 값의 형식이 잘못된 경우
        """
        values = {}
        for name, field in cls.model_fields.items():
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            if field.annotation is bool:
                values[name] = parse_bool(raw)
            else:
                values[name] = raw

        values.update({k: v for k, v in overrides.items() if v is not None})

        config = cls(**values)
        if config.log_level.lower() not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"유효하지 않은 로그 레벨입니다: {config.log_level} "
                f"(허용된 값: {', '.join(VALID_LOG_LEVELS)})"
            )
        return config

    def require_token(self) -> str:
        """
        GitHub 토큰을 반환하는 함수

        Returns:
            str: GitHub 토큰

        Raises:
            ConfigError: 토큰이 설정되지 않은 경우
        """
        if not self.github_token:
            raise ConfigError(
                "GOVERN_GITHUB_TOKEN 환경변수가 설정되지 않았습니다. "
                "--github-token 옵션 또는 .env 파일에 토큰을 설정해주세요."
            )
        return self.github_token


def parse_bool(value: str) -> bool:
    """
    환경변수 문자열을 bool로 변환하는 함수

    Args:
        value: 환경변수 값 (예: "true", "1", "yes")

    Returns:
        bool: 변환된 값

    Raises:
        ConfigError: bool로 해석할 수 없는 경우
    """
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("", "0", "false", "no", "off"):
        return False
    raise ConfigError(f"bool 값으로 해석할 수 없습니다: {value}")


def split_list(value: str | None) -> list[str]:
    """
    쉼표로 구분된 환경변수 값을 리스트로 변환하는 함수

    Args:
        value: 쉼표 구분 문자열 (None이면 빈 리스트)

    Returns:
        list[str]: 공백이 제거된 항목 목록
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
