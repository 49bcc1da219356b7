"""
라벨 정의 모델

라벨 정의 디렉토리의 YAML 파일(최상위 labels 목록)을 읽어 Label 목록을 만듭니다.
변경된 파일 경로가 라벨의 glob 규칙에 맞으면 PR에 라벨을 붙입니다.

glob 규칙:
- "*", "?": 경로 구분자(/)를 넘지 않음 (점으로 시작하는 이름 포함)
- "**": 경로 구분자를 넘어 0개 이상의 디렉토리와 일치
- "[abc]", "[!abc]": 문자 클래스
- "{a,b}": 대안
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from wcmatch import glob

from service.config import ConfigError

# "*"는 점으로 시작하는 이름과도 일치
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB


class Label(BaseModel):
    """PR에 붙일 라벨과 적용 규칙"""

    name: str = ""
    description: str = ""
    color: str = ""
    apply_on_pr_match_repos: list[str] = []
    apply_on_pr_match_paths: list[str] = []
    # 적용/제거 시점은 정의만 읽고 스케줄링하지 않음
    apply_after: str | None = None
    remove_after: str | None = None
    do_not_remove_if_labels_exist: list[str] = []

    @field_validator("color", mode="before")
    @classmethod
    def coerce_color(cls, value):
        # YAML이 "000000" 같은 색상을 정수로 읽는 경우
        if isinstance(value, int):
            return f"{value:06d}"
        return value

    @field_validator("apply_after", "remove_after", mode="before")
    @classmethod
    def coerce_duration(cls, value):
        if value is None:
            return None
        return str(value)

    def applies_to(self, repo: str, file: str) -> bool:
        """
        라벨이 주어진 리포지토리의 파일 변경에 적용되는지 확인하는 함수

        경로 규칙이 없는 라벨은 어떤 파일에도 적용되지 않습니다.

        Args:
            repo: 리포지토리 이름
            file: 변경된 파일 경로

        Returns:
            bool: 적용되면 True
        """
        if self.apply_on_pr_match_repos and repo not in self.apply_on_pr_match_repos:
            return False

        return any(glob_match(pattern, file) for pattern in self.apply_on_pr_match_paths)


def glob_match(pattern: str, path: str) -> bool:
    """
    경로가 glob 패턴과 일치하는지 확인하는 함수

    Args:
        pattern: glob 패턴 (예: "lib/**/*.c")
        path: 슬래시로 구분된 상대 경로

    Returns:
        bool: 일치하면 True
    """
    return glob.globmatch(path, pattern, flags=GLOB_FLAGS)


def load_labels_file(path: Path) -> list[Label]:
    """
    라벨 정의 파일 하나를 읽는 함수

    Args:
        path: 최상위에 labels 목록이 있는 YAML 파일

    Returns:
        list[Label]: 파일에 정의된 라벨 목록

    Raises:
        ConfigError: YAML 형식이 잘못되었거나 이름이 없는 라벨이 있는 경우
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        labels = [Label.model_validate(item) for item in data.get("labels") or []]
    except (OSError, yaml.YAMLError, ValidationError, AttributeError) as e:
        raise ConfigError(f"라벨 정의 파일을 읽을 수 없습니다: {path}: {e}") from e

    for label in labels:
        if not label.name:
            raise ConfigError(f"라벨 이름이 없습니다: {path}")

    return labels


def load_labels(labels_dir: str | Path) -> list[Label]:
    """
    라벨 정의 디렉토리의 모든 파일을 읽는 함수

    Args:
        labels_dir: 정의 파일 디렉토리

    Returns:
        list[Label]: 파일 이름 순, 파일 내 순서대로 나열된 라벨 목록

    Raises:
        ConfigError: 디렉토리를 읽을 수 없거나 파일이 잘못된 경우
    """
    directory = Path(labels_dir)
    if not directory.is_dir():
        raise ConfigError(f"라벨 정의 디렉토리를 찾을 수 없습니다: {directory}")

    labels = []
    for path in sorted(directory.iterdir()):
        if path.is_file():
            labels.extend(load_labels_file(path))
    return labels


def dump_labels(labels: list[Label]) -> str:
    """
    라벨 목록을 정의 파일 형식의 YAML 문자열로 변환하는 함수

    Args:
        labels: 라벨 목록

    Returns:
        str: 최상위 labels 목록을 가진 YAML 문자열
    """
    data = {"labels": [label.model_dump(exclude_none=True) for label in labels]}
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
