"""
리포지토리 정의 모델

리포지토리 정의 디렉토리(파일 하나당 리포지토리 하나)를 읽어 Repository 목록을 만듭니다.
"lib-foo"처럼 유형 접두사가 붙은 이름과 "foo"처럼 붙지 않은 이름을 모두 같은 리포지토리로 취급합니다.
"""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from service.config import ConfigError


class RepoType(str, Enum):
    APP = "app"
    LIB = "lib"
    PLAT = "plat"
    CORE = "core"
    MISC = "misc"


class RepoPermission(str, Enum):
    READ = "read"
    TRIAGE = "triage"
    WRITE = "write"
    MAINTAIN = "maintain"
    ADMIN = "admin"


REPO_TYPES = [t.value for t in RepoType]

# 전체 이름에 접두사를 붙이지 않는 유형
UNPREFIXED_REPO_TYPES = [RepoType.MISC, RepoType.CORE]


class Repository(BaseModel):
    """조직의 리포지토리"""

    name: str = ""
    type: RepoType | None = None
    origin: str = ""
    permission: RepoPermission | None = Field(default=None)

    def model_post_init(self, __context) -> None:
        # "lib-foo" -> type=lib, name=foo
        prefix, sep, rest = self.name.partition("-")
        if sep and prefix in REPO_TYPES:
            self.name = rest
            self.type = RepoType(prefix)

    @property
    def fullname(self) -> str:
        """유형 접두사가 붙은 전체 이름 (misc, core 유형은 접두사 없음)"""
        if self.type is None or self.type in UNPREFIXED_REPO_TYPES:
            return self.name
        return f"{self.type.value}-{self.name}"

    def name_equals(self, name: str) -> bool:
        """
        주어진 이름이 이 리포지토리를 가리키는지 확인하는 함수

        Args:
            name: 비교할 이름 (접두사 유무 무관)

        Returns:
            bool: 같은 리포지토리면 True
        """
        if name == self.name:
            return True
        return any(f"{t}-{self.name}" == name for t in REPO_TYPES)


def find_repo_by_name(name: str, repos: list[Repository]) -> Repository | None:
    """
    이름으로 리포지토리를 찾는 함수

    정확히 일치하는 이름을 먼저 찾고, 없으면 유형 접두사를 제거하고 다시 찾습니다.

    Args:
        name: 리포지토리 이름 (예: "lib-lwip", "lwip")
        repos: 검색 대상 리포지토리 목록

    Returns:
        Repository | None: 찾은 리포지토리, 없으면 None
    """
    for repo in repos:
        if repo.name == name:
            return repo

    _, sep, rest = name.partition("-")
    if sep:
        for repo in repos:
            if repo.name == rest:
                return repo

    return None


def load_repo(path: Path, github_org: str) -> Repository:
    """
    리포지토리 정의 파일 하나를 읽는 함수

    Args:
        path: YAML 파일 경로
        github_org: origin URL 생성에 사용할 Organization 이름

    Returns:
        Repository: 읽은 리포지토리

    Raises:
        ConfigError: YAML 형식이 잘못되었거나 이름이 없는 경우
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        repo = Repository.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise ConfigError(f"리포지토리 정의 파일을 읽을 수 없습니다: {path}: {e}") from e

    if not repo.name:
        raise ConfigError(f"리포지토리 이름이 없습니다: {path}")

    repo.origin = f"https://github.com/{github_org}/{repo.fullname}.git"
    return repo


def load_repos(repos_dir: str | Path, github_org: str) -> list[Repository]:
    """
    리포지토리 정의 디렉토리의 모든 파일을 읽는 함수

    Args:
        repos_dir: 정의 파일 디렉토리
        github_org: Organization 이름

    Returns:
        list[Repository]: 파일 이름 순으로 정렬된 리포지토리 목록

    Raises:
        ConfigError: 디렉토리를 읽을 수 없거나 파일이 잘못된 경우
    """
    directory = Path(repos_dir)
    if not directory.is_dir():
        raise ConfigError(f"리포지토리 정의 디렉토리를 찾을 수 없습니다: {directory}")

    return [
        load_repo(path, github_org)
        for path in sorted(directory.iterdir())
        if path.is_file()
    ]
