"""pytest 설정 파일"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_user(login: str) -> MagicMock:
    user = MagicMock()
    user.login = login
    return user


def make_label(name: str) -> MagicMock:
    label = MagicMock()
    label.name = name
    return label


def make_comment(login: str, body: str, state: str | None = None) -> MagicMock:
    """댓글 또는 리뷰 (state가 있으면 리뷰)"""
    comment = MagicMock()
    comment.user = make_user(login)
    comment.body = body
    if state is not None:
        comment.state = state
    return comment


def make_pr(
    number: int = 1,
    state: str = "open",
    author: str = "author",
    assignees: list[str] | None = None,
    requested_reviewers: list[str] | None = None,
    labels: list[str] | None = None,
    draft: bool = False,
    mergeable: bool | None = True,
    body: str = "",
) -> MagicMock:
    """PyGithub PullRequest를 흉내내는 Mock"""
    pr = MagicMock()
    pr.number = number
    pr.state = state
    pr.user = make_user(author)
    pr.assignees = [make_user(login) for login in assignees or []]
    pr.requested_reviewers = [make_user(login) for login in requested_reviewers or []]
    pr.labels = [make_label(name) for name in labels or []]
    pr.draft = draft
    pr.mergeable = mergeable
    pr.body = body
    return pr


@pytest.fixture
def write_yaml(tmp_path):
    """tmp_path 아래에 YAML 파일을 만드는 헬퍼"""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
