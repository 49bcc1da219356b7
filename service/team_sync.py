"""
팀 동기화

팀 정의를 GitHub Organization에 반영합니다.

동기화 순서:
    부모 팀 (재귀) -> 팀 생성/갱신 -> 팀 구성원 -> maintainers-<이름> 하위 팀 -> 그 구성원
    -> reviewers-<이름> 하위 팀 -> 그 구성원

구성원 동기화는 제거(현재 - 정의)를 먼저, 추가(정의 - 현재)를 나중에 실행합니다.
중간에 실패해도 되돌리지 않으며, 다시 실행하면 정의된 상태로 수렴합니다.
"""

import logging

from service.github import GithubError
from service.team import Team, TeamType
from service.user import UserRole

logger = logging.getLogger(__name__)


class TeamSyncError(RuntimeError):
    """팀 동기화에 실패한 경우"""


def reconcile_members(
    client,
    team_name: str,
    role: str,
    desired: list[str],
    dry_run: bool = False,
) -> tuple[list[str], list[str]]:
    """
    팀 구성원을 정의된 목록과 일치시키는 함수

    Args:
        client: GithubClient
        team_name: 팀 이름
        role: 추가할 때 지정할 역할 ("member" 또는 "maintainer")
        desired: 정의된 구성원 사용자명 목록
        dry_run: True이면 변경 없이 계획만 계산

    Returns:
        tuple[list[str], list[str]]: (추가한 사용자, 제거한 사용자)

    Raises:
        TeamSyncError: 구성원 조회, 추가 또는 제거에 실패한 경우
    """
    try:
        if dry_run and client.find_team(team_name) is None:
            current = []
        else:
            current = client.list_team_members(team_name)
    except GithubError as e:
        raise TeamSyncError(f"could not list members of {team_name}: {e}") from e

    remove = [username for username in current if username not in desired]
    add = [username for username in desired if username not in current]

    for username in remove:
        if dry_run:
            logger.info("[DRY-RUN] %s에서 %s 제거 예정", team_name, username)
            continue
        try:
            client.remove_team_member(team_name, username)
        except GithubError as e:
            raise TeamSyncError(f"could not remove user {username} from {team_name}: {e}") from e
        logger.info("%s에서 %s 제거", team_name, username)

    for username in add:
        if dry_run:
            logger.info("[DRY-RUN] %s에 %s 추가 예정 (%s)", team_name, username, role)
            continue
        try:
            client.add_team_member(team_name, username, role)
        except GithubError as e:
            raise TeamSyncError(f"could not add user {username} to {team_name}: {e}") from e
        logger.info("%s에 %s 추가 (%s)", team_name, username, role)

    return add, remove


def _upsert(
    client,
    name: str,
    description: str,
    parent_team_id: int | None,
    privacy: str | None,
    repo_names: list[str],
    dry_run: bool,
) -> int | None:
    """팀을 생성 또는 갱신하고 ID를 반환 (dry-run이면 기존 팀 ID, 없으면 None)"""
    if dry_run:
        logger.info("[DRY-RUN] 팀 생성/갱신 예정: %s", name)
        try:
            existing = client.find_team(name)
        except GithubError as e:
            raise TeamSyncError(f"could not find team {name}: {e}") from e
        return existing.id if existing is not None else None

    try:
        return client.create_or_update_team(
            name,
            description,
            parent_team_id=parent_team_id,
            privacy=privacy,
            repo_names=repo_names,
        )
    except GithubError as e:
        raise TeamSyncError(f"could not create or update team {name}: {e}") from e


def sync_team(client, team: Team, dry_run: bool = False) -> None:
    """
    팀 하나를 동기화하는 함수 (부모 팀이 있으면 먼저 동기화)

    Args:
        client: GithubClient
        team: 동기화할 팀
        dry_run: True이면 GitHub를 변경하지 않음

    Raises:
        TeamSyncError: 동기화에 실패한 경우
    """
    if team.has_synced:
        return

    team.infer_type()

    parent_team_id = None
    if team.parent:
        if team.parent_team is not None:
            sync_team(client, team.parent_team, dry_run=dry_run)
            parent_name = team.parent_team.fullname
        else:
            parent_name = team.parent

        try:
            parent = client.find_team(parent_name)
        except GithubError as e:
            raise TeamSyncError(f"could not find parent team {parent_name}: {e}") from e

        if parent is not None:
            parent_team_id = parent.id
        elif not dry_run:
            raise TeamSyncError(f"parent team not found: {parent_name}")

    logger.info("@%s 동기화 중...", team.fullname)

    privacy = team.privacy.value if team.privacy else None
    repo_names = team.repo_names()

    team_id = _upsert(
        client, team.fullname, team.description, parent_team_id, privacy, repo_names, dry_run
    )
    reconcile_members(
        client, team.fullname, UserRole.MEMBER.value, team.member_handles(), dry_run=dry_run
    )

    maintainers = team.maintainer_handles()
    if maintainers:
        name = f"{TeamType.MAINTAINERS.value}-{team.name}"
        logger.info("@%s 동기화 중...", name)
        _upsert(
            client, name, f"{team.fullname} maintainers", team_id, privacy, repo_names, dry_run
        )
        reconcile_members(
            client, name, UserRole.MAINTAINER.value, maintainers, dry_run=dry_run
        )

    reviewers = team.reviewer_handles()
    if reviewers:
        name = f"{TeamType.REVIEWERS.value}-{team.name}"
        logger.info("@%s 동기화 중...", name)
        _upsert(
            client, name, f"{team.fullname} reviewers", team_id, privacy, repo_names, dry_run
        )
        reconcile_members(client, name, UserRole.MEMBER.value, reviewers, dry_run=dry_run)

    team.mark_synced()
