"""
governctl 스크립트 공통 유틸리티 모듈

전역 옵션, 설정 로드, GitHub 클라이언트 생성, PR 참조 파싱, 결과 출력을 담당합니다.
보안을 위해 토큰은 환경변수(GOVERN_GITHUB_TOKEN) 또는 .env 파일로 관리합니다.
"""
import argparse
import json
import logging
import os
import shutil
import sys
import tempfile
from collections.abc import Callable
from contextlib import contextmanager
from typing import Generator
from urllib.parse import urlparse

import tabulate
import yaml

from service.assignment import AssignmentError
from service.checkpatch import CheckpatchError
from service.config import ENV_PREFIX, VALID_LOG_LEVELS, Config, parse_bool, split_list
from service.git import GitError
from service.github import GithubClient, GithubError
from service.labeling import LabelSyncError
from service.merge import MergeError
from service.mergeable import MergePolicy
from service.team_sync import TeamSyncError

tabulate.WIDE_CHARS_MODE = True

OUTPUT_FORMATS = ["table", "json", "yaml", "html"]

PR_REFERENCE_FORMAT = (
    "ORG/REPO/ID, https://github.com/ORG/REPO/pull/ID 또는 https://github.com/ORG/REPO ID"
)


def add_global_arguments(parser: argparse.ArgumentParser) -> None:
    """
    모든 명령에 공통인 전역 옵션을 추가하는 함수

    지정하지 않은 옵션은 None으로 남아 GOVERN_* 환경변수 값이 사용됩니다.
    """
    parser.add_argument(
        "-D", "--dry-run", action="store_true", default=None,
        help="실제 변경 없이 어떤 작업이 실행될지 확인",
    )
    parser.add_argument("--github-org", help="GitHub Organization (기본값: unikraft)")
    parser.add_argument("--github-user", help="GitHub 사용자명")
    parser.add_argument("--github-token", help="GitHub Personal Access Token")
    parser.add_argument("-E", "--github-endpoint", help="GitHub Enterprise API 주소")
    parser.add_argument(
        "-S", "--github-skip-ssl", action="store_true", default=None,
        help="SSL 인증서 검증 건너뛰기",
    )
    parser.add_argument(
        "-l", "--log-level", choices=VALID_LOG_LEVELS, help="로그 레벨 (기본값: info)"
    )
    parser.add_argument(
        "--no-render", action="store_true", default=None, help="출력 폭 제한 없이 출력"
    )
    parser.add_argument("-T", "--teams-dir", help="팀 정의 디렉토리 (기본값: teams)")
    parser.add_argument("-r", "--repos-dir", help="리포지토리 정의 디렉토리 (기본값: repos)")
    parser.add_argument("--labels-dir", help="라벨 정의 디렉토리 (기본값: .github/labels)")
    parser.add_argument("-j", "--temp-dir", help="작업 디렉토리 (지정하면 삭제하지 않음)")


def load_config(args: argparse.Namespace) -> Config:
    """
    환경변수와 명령행 인자로 설정을 만드는 함수

    Args:
        args: 파싱된 명령행 인자

    Returns:
        Config: 설정 객체 (명령행 인자가 환경변수보다 우선)
    """
    overrides = {name: getattr(args, name, None) for name in Config.model_fields}
    return Config.from_env(**overrides)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def get_github_client(config: Config) -> GithubClient:
    """
    설정으로 GitHub 클라이언트를 생성하는 함수

    Args:
        config: 전역 설정

    Returns:
        GithubClient: Organization 관리용 클라이언트

    Raises:
        ConfigError: 토큰이 설정되지 않은 경우
    """
    return GithubClient.connect(
        config.require_token(),
        config.github_org,
        endpoint=config.github_endpoint,
        skip_ssl=config.github_skip_ssl,
    )


def _parse_number(value: str, message: str) -> int:
    if not value.isdigit():
        raise ValueError(f"{message}: '{value}'")
    return int(value)


def _parse_github_url(value: str) -> list[str]:
    uri = urlparse(value)
    if uri.scheme not in ("http", "https") or not uri.netloc:
        raise ValueError(f"URL 형식이 아닙니다: '{value}' (예상 형식: {PR_REFERENCE_FORMAT})")
    if uri.netloc != "github.com":
        raise ValueError(f"GitHub URL이 아닙니다: '{value}'")
    return [part for part in uri.path.split("/") if part]


def parse_pr_reference(
    args: list[str], env: dict[str, str] | None = None
) -> tuple[str, str, int]:
    """
    PR 참조를 (org, repo, 번호)로 파싱하는 함수

    허용하는 형식:
    - ORG/REPO/ID
    - https://github.com/ORG/REPO/pull/ID
    - https://github.com/ORG/REPO ID
    - 인자 없음 (GitHub Actions에서 GITHUB_REPOSITORY, GITHUB_REF=refs/pull/ID/merge 사용)

    Args:
        args: 위치 인자 목록
        env: 환경변수 (None이면 os.environ)

    Returns:
        tuple[str, str, int]: (org, repo, PR 번호)

    Raises:
        ValueError: 형식이 잘못된 경우
    """
    env = os.environ if env is None else env

    if not args and env.get("GITHUB_ACTIONS") == "true":
        split = env.get("GITHUB_REPOSITORY", "").split("/")
        if len(split) != 2 or not all(split):
            raise ValueError("could not parse environmental variable 'GITHUB_REPOSITORY': invalid format")

        ref = env.get("GITHUB_REF", "").split("/")
        if len(ref) < 3 or ref[:2] != ["refs", "pull"]:
            raise ValueError("could not parse environmental variable 'GITHUB_REF': invalid format")

        number = _parse_number(ref[2], "GITHUB_REF must reference a pull request ID")
        return split[0], split[1], number

    if len(args) == 1 and "://" in args[0]:
        parts = _parse_github_url(args[0])
        if len(parts) != 4 or parts[2] != "pull":
            raise ValueError(f"expected GitHub URL to contain a pull request: '{args[0]}'")
        return parts[0], parts[1], _parse_number(parts[3], "PR ID is not numeric")

    if len(args) == 1:
        split = args[0].split("/")
        if len(split) != 3 or not all(split):
            raise ValueError(f"expected format {PR_REFERENCE_FORMAT}: '{args[0]}'")
        return split[0], split[1], _parse_number(split[2], "PR ID is not numeric")

    if len(args) == 2:
        parts = _parse_github_url(args[0])
        if len(parts) != 2:
            raise ValueError(f"expected GitHub URL to only have org/repo: '{args[0]}'")
        return parts[0], parts[1], _parse_number(args[1], "PR ID is not numeric")

    raise ValueError(f"could not parse arguments: expected {PR_REFERENCE_FORMAT}")


def parse_repo_reference(
    args: list[str], env: dict[str, str] | None = None
) -> tuple[str, str, int | None]:
    """
    리포지토리 또는 PR 참조를 파싱하는 함수 (ORG/REPO이면 PR 번호는 None)
    """
    if len(args) == 1 and "://" not in args[0] and args[0].count("/") == 1:
        org, _, repo = args[0].partition("/")
        if org and repo:
            return org, repo, None
    return parse_pr_reference(args, env)


@contextmanager
def workdir(config: Config, prefix: str) -> Generator[str, None, None]:
    """
    작업 디렉토리를 제공하는 컨텍스트 매니저

    --temp-dir이 지정되지 않으면 임시 디렉토리를 만들고 끝나면 삭제합니다.
    """
    if config.temp_dir:
        os.makedirs(config.temp_dir, exist_ok=True)
        yield config.temp_dir
        return

    path = tempfile.mkdtemp(prefix=prefix)
    try:
        yield path
    finally:
        logging.getLogger(__name__).info("작업 디렉토리 삭제: %s", path)
        shutil.rmtree(path, ignore_errors=True)


def render(rows: list[dict], output: str = "table", max_width: int | None = None) -> str:
    """
    결과 목록을 지정한 형식의 문자열로 변환하는 함수

    Args:
        rows: 출력할 행 목록 (모든 행의 키가 같아야 함)
        output: table, json, yaml, html 중 하나
        max_width: table 형식의 열 최대 폭 (None이면 제한 없음)

    Returns:
        str: 변환된 문자열
    """
    if output == "json":
        return json.dumps(rows, ensure_ascii=False, indent=2)
    if output == "yaml":
        return yaml.safe_dump(rows, sort_keys=False, allow_unicode=True)

    headers = [key.upper() for key in rows[0]] if rows else []
    data = [list(row.values()) for row in rows]
    if output == "html":
        return tabulate.tabulate(data, headers=headers, tablefmt="html")
    return tabulate.tabulate(data, headers=headers, tablefmt="simple", maxcolwidths=max_width)


# ----------------------------------------------------------------------
# 병합 정책 옵션 (pr check mergeable, pr merge 공통)
# ----------------------------------------------------------------------

# (옵션 이름, 정책 필드, 종류, 도움말)
POLICY_OPTIONS = [
    ("--states", "states", list, "이 상태 중 하나인 PR만 병합 가능 (기본값: open)"),
    ("--ignore-states", "ignore_states", list, "이 상태 중 하나인 PR은 제외"),
    ("--labels", "labels", list, "이 라벨 중 하나가 있어야 병합 가능"),
    ("--ignore-labels", "ignore_labels", list, "이 라벨 중 하나라도 있으면 제외"),
    ("--no-conflicts", "no_conflicts", bool, "충돌이 없어야 병합 가능"),
    ("--no-draft", "no_draft", bool, "draft 상태가 아니어야 병합 가능"),
    ("--min-approvals", "min_approvals", int, "최소 승인 수 (기본값: 1)"),
    ("--min-reviews", "min_reviews", int, "최소 리뷰 수 (기본값: 1)"),
    ("--approver-comments", "approver_comments", list, "승인자가 작성하는 정규식"),
    ("--reviewer-comments", "reviewer_comments", list, "리뷰어가 작성하는 정규식"),
    ("--approve-states", "approve_states", list, "승인으로 인정할 리뷰 상태 (기본값: approve)"),
    ("--review-states", "review_states", list, "리뷰로 인정할 리뷰 상태"),
    ("--approver-teams", "approver_teams", list, "승인자가 속해야 하는 팀"),
    ("--reviewer-teams", "reviewer_teams", list, "리뷰어가 속해야 하는 팀"),
    ("--no-respect-assignees", "no_respect_assignees", bool, "PR 담당자를 승인자로 인정하지 않음"),
    ("--no-respect-reviewers", "no_respect_reviewers", bool, "리뷰 요청 대상자를 리뷰어로 인정하지 않음"),
]


def add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    """병합 정책 옵션을 추가하는 함수 (목록 옵션은 여러 번 지정 가능)"""
    for option, field, kind, help_text in POLICY_OPTIONS:
        if kind is bool:
            parser.add_argument(option, dest=field, action="store_true", default=None, help=help_text)
        elif kind is int:
            parser.add_argument(option, dest=field, type=int, help=help_text)
        else:
            parser.add_argument(option, dest=field, action="append", help=help_text)


def policy_from_args(args: argparse.Namespace, env: dict[str, str] | None = None) -> MergePolicy:
    """
    명령행 인자와 GOVERN_* 환경변수로 병합 정책을 만드는 함수

    Raises:
        ConfigError: 정책 값이 잘못된 경우
    """
    env = os.environ if env is None else env
    values = {}
    for _option, field, kind, _help in POLICY_OPTIONS:
        value = getattr(args, field, None)
        raw = env.get(ENV_PREFIX + field.upper())
        if value is None and raw is not None:
            if kind is bool:
                value = parse_bool(raw)
            elif kind is int:
                value = raw.strip()
            else:
                value = split_list(raw)
        values[field] = value
    return MergePolicy.build(**values)


# ----------------------------------------------------------------------
# 실행
# ----------------------------------------------------------------------

# main()에서 [ERROR]로 출력하고 종료 코드 1로 끝내는 예외
HANDLED_ERRORS = (
    ValueError,
    GithubError,
    TeamSyncError,
    AssignmentError,
    LabelSyncError,
    GitError,
    CheckpatchError,
    MergeError,
)


def execute(run: Callable[[Config, argparse.Namespace], int], args: argparse.Namespace) -> int:
    """
    설정을 읽고 명령을 실행한 뒤 종료 코드를 반환하는 함수

    Args:
        run: (설정, 인자) -> 종료 코드
        args: 파싱된 명령행 인자

    Returns:
        int: 종료 코드 (오류가 발생하면 1)
    """
    try:
        config = load_config(args)
        setup_logging(config.log_level)
        return run(config, args)
    except HANDLED_ERRORS as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
