"""
PR 라벨 동기화

PR에서 변경된 파일마다 라벨 정의의 경로 규칙을 확인하여, 일치하는 라벨을 PR에 추가합니다.
"""

import logging

from service.github import GithubError
from service.label import Label

logger = logging.getLogger(__name__)


class LabelSyncError(RuntimeError):
    """PR에 라벨을 적용할 수 없는 경우"""


def matching_labels(labels: list[Label], repo: str, paths: list[str]) -> list[str]:
    """
    변경된 파일 경로 중 하나라도 규칙에 맞는 라벨 이름 목록을 반환하는 함수

    Args:
        labels: 라벨 정의 목록
        repo: 리포지토리 이름
        paths: 변경된 파일 경로 목록

    Returns:
        list[str]: 정의 순서대로 정렬된 라벨 이름 (중복 없음)
    """
    return [
        label.name
        for label in labels
        if any(label.applies_to(repo, path) for path in paths)
    ]


def sync_labels(client, pr, repo: str, labels: list[Label], dry_run: bool = False) -> list[str]:
    """
    PR에 라벨을 적용하는 함수

    Args:
        client: GithubClient
        pr: PyGithub PullRequest
        repo: 리포지토리 이름
        labels: 라벨 정의 목록
        dry_run: True이면 라벨을 추가하지 않음

    Returns:
        list[str]: 적용 대상 라벨 이름

    Raises:
        LabelSyncError: PR이 닫혔거나 GitHub 요청이 실패한 경우
    """
    if pr.state == "closed":
        raise LabelSyncError(f"pull request #{pr.number} is closed")

    try:
        paths = client.list_changed_files(pr)
        names = matching_labels(labels, repo, paths)
        logger.info("#%d 변경 파일 %d개, 적용할 라벨: %s", pr.number, len(paths), names)

        if names and not dry_run:
            client.add_labels(pr, names)
    except GithubError as e:
        raise LabelSyncError(f"could not sync labels on #{pr.number}: {e}") from e

    return names
