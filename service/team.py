"""
팀 정의 모델

팀 정의 디렉토리(파일 하나당 팀 하나)를 읽어 Team 목록을 만듭니다.
모든 파일을 먼저 읽은 뒤 부모 팀을 연결하므로, 아직 읽지 않은 팀을 부모로 참조해도 됩니다.
"""

import logging
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, PrivateAttr, ValidationError, model_validator

from service.config import ConfigError
from service.repo import Repository, find_repo_by_name
from service.user import User

logger = logging.getLogger(__name__)


class TeamType(str, Enum):
    SIG = "sig"
    MAINTAINERS = "maintainers"
    REVIEWERS = "reviewers"
    MISC = "misc"


class TeamPrivacy(str, Enum):
    CLOSED = "closed"
    SECRET = "secret"


class CodeReviewAlgorithm(str, Enum):
    ROUND_ROBIN = "rr"
    LOAD_BALANCE = "lb"


# 이름 접두사로 유형을 추론할 수 있는 팀 유형
PREFIXED_TEAM_TYPES = [TeamType.SIG, TeamType.MAINTAINERS, TeamType.REVIEWERS]


class CodeReview(BaseModel):
    """팀의 코드 리뷰 정책 (정의만 읽고 강제하지 않음)"""

    num_reviewers: int = 0
    algorithm: CodeReviewAlgorithm | None = None
    never_assign: list[User] = []
    dont_notify_team: bool = False
    include_child_teams: bool = False
    remove_review_request: bool = False
    count_existing_members: bool = False


class Team(BaseModel):
    """조직의 팀"""

    name: str = ""
    type: TeamType | None = None
    privacy: TeamPrivacy | None = None
    parent: str = ""
    description: str = ""
    code_review: CodeReview = CodeReview()
    maintainers: list[User] = []
    reviewers: list[User] = []
    members: list[User] = []
    repos: list[Repository] = []

    _parent_team: "Team | None" = PrivateAttr(default=None)
    _has_synced: bool = PrivateAttr(default=False)

    @model_validator(mode="after")
    def check_github_handles(self) -> "Team":
        for user in self.maintainers + self.reviewers + self.members:
            if not user.github:
                raise ValueError(
                    f"GitHub 사용자명이 없는 구성원이 있습니다: {user.name or '(이름 없음)'}"
                )
        return self

    def model_post_init(self, __context) -> None:
        self.infer_type()

    def infer_type(self) -> None:
        """
        유형이 지정되지 않은 경우 이름 접두사로 유형을 추론하는 함수

        "sig-net"은 type=sig, name=net이 되고, 접두사가 없으면 misc가 됩니다.
        """
        prefix, sep, rest = self.name.partition("-")
        for team_type in PREFIXED_TEAM_TYPES:
            if sep and prefix == team_type.value and self.type in (None, team_type):
                self.name = rest
                self.type = team_type
                break

        if self.type is None:
            self.type = TeamType.MISC

    @property
    def fullname(self) -> str:
        """유형 접두사가 붙은 전체 이름 (misc 유형은 접두사 없음)"""
        if self.type in (None, TeamType.MISC):
            return self.name
        return f"{self.type.value}-{self.name}"

    @property
    def parent_team(self) -> "Team | None":
        return self._parent_team

    def set_parent_team(self, team: "Team | None") -> None:
        self._parent_team = team

    @property
    def has_synced(self) -> bool:
        return self._has_synced

    def mark_synced(self) -> None:
        self._has_synced = True

    def maintainer_handles(self) -> list[str]:
        return [user.github for user in self.maintainers]

    def reviewer_handles(self) -> list[str]:
        return [user.github for user in self.reviewers]

    def member_handles(self) -> list[str]:
        """유지보수자, 리뷰어, 일반 구성원을 중복 없이 합친 목록"""
        handles = []
        for user in self.maintainers + self.reviewers + self.members:
            if user.github not in handles:
                handles.append(user.github)
        return handles

    def repo_names(self) -> list[str]:
        return [repo.fullname for repo in self.repos]

    def owns_repo(self, repo_name: str) -> bool:
        return any(repo.name_equals(repo_name) for repo in self.repos)


def strip_team_mention(name: str) -> str:
    """
    "@org/team" 형식의 멘션에서 팀 이름만 남기는 함수

    Args:
        name: 팀 이름 또는 멘션

    Returns:
        str: 팀 이름
    """
    if name.startswith("@") and "/" in name:
        return name.split("/", 1)[1]
    return name


def find_team_by_name(name: str, teams: list[Team]) -> Team | None:
    """
    이름으로 팀을 찾는 함수

    Args:
        name: 팀 이름, 전체 이름, 또는 "@org/team" 멘션
        teams: 검색 대상 팀 목록

    Returns:
        Team | None: 찾은 팀, 없으면 None
    """
    name = strip_team_mention(name)
    for team in teams:
        if team.name == name or team.fullname == name:
            return team
    return None


def load_team(path: Path) -> Team:
    """
    팀 정의 파일 하나를 읽는 함수

    Args:
        path: YAML 파일 경로

    Returns:
        Team: 읽은 팀

    Raises:
        ConfigError: YAML 형식이 잘못되었거나, 이름 또는 GitHub 사용자명이 없는 경우
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        team = Team.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise ConfigError(f"팀 정의 파일을 읽을 수 없습니다: {path}: {e}") from e

    if not team.name:
        raise ConfigError(f"팀 이름이 없습니다: {path}")

    return team


def link_parents(teams: list[Team]) -> None:
    """
    모든 팀의 부모 팀을 연결하는 함수

    로컬 정의에서 부모를 찾지 못하면 경고만 남깁니다.
    원격에는 이미 존재할 수 있으므로 동기화는 계속 진행합니다.

    Args:
        teams: 팀 목록
    """
    for team in teams:
        if not team.parent:
            continue

        parent = find_team_by_name(team.parent, teams)
        if parent is None:
            logger.warning("정의된 팀 중에서 부모 팀을 찾을 수 없습니다: %s", team.parent)
            continue

        team.set_parent_team(parent)


def resolve_repos(teams: list[Team], repos: list[Repository]) -> None:
    """
    팀에 기재된 리포지토리를 리포지토리 정의로 교체하는 함수

    정의에 없는 리포지토리는 팀에 기재된 그대로 둡니다.

    Args:
        teams: 팀 목록
        repos: 리포지토리 정의 목록
    """
    for team in teams:
        for i, repo in enumerate(team.repos):
            found = find_repo_by_name(repo.fullname, repos)
            if found is None:
                logger.debug("리포지토리 정의를 찾을 수 없습니다: %s", repo.fullname)
                continue
            team.repos[i] = found


def load_teams(teams_dir: str | Path) -> list[Team]:
    """
    팀 정의 디렉토리의 모든 파일을 읽고 부모 팀을 연결하는 함수

    Args:
        teams_dir: 정의 파일 디렉토리

    Returns:
        list[Team]: 파일 이름 순으로 정렬된 팀 목록

    Raises:
        ConfigError: 디렉토리를 읽을 수 없거나 파일이 잘못된 경우
    """
    directory = Path(teams_dir)
    if not directory.is_dir():
        raise ConfigError(f"팀 정의 디렉토리를 찾을 수 없습니다: {directory}")

    teams = [load_team(path) for path in sorted(directory.iterdir()) if path.is_file()]
    link_parents(teams)
    return teams
