"""
PR 병합

병합 정책을 확인한 뒤, PR의 각 커밋을 승인 트레일러가 붙은 패치로 다시 만들어
base 브랜치에 git am으로 적용합니다. --push이면 base 브랜치를 push하고,
GitHub는 이를 PR 병합으로 인식합니다.
"""

import logging
import os
import re
from pathlib import Path

from pydantic import BaseModel

from service.github import GithubClient
from service.git import GitError, run_command, run_gh, run_git
from service.mergeable import MergePolicy, evaluate_merge_requirements
from service.patch import Patch, trailer_name_from_capture
from service.pull_request import PullRequestCheckout

logger = logging.getLogger(__name__)

ISSUE_REFERENCE = re.compile(r"(?:Closes|Fixes|Resolves): #([0-9]+)")

GITHUB_ACTIONS_TRAILER = "Tested-by: GitHub Actions <monkey+github-actions@unikraft.io>"

MERGE_LABEL = "merge"
MERGED_LABEL = "ci/merged"


class MergeError(RuntimeError):
    """PR을 병합할 수 없는 경우"""


class MergeOptions(BaseModel):
    """pr merge 명령 옵션"""

    base_branch: str = ""  # 비어 있으면 PR의 base 브랜치
    repo_path: str = ""  # 패치를 적용할 로컬 리포지토리 (비어 있으면 새로 클론)
    committer_name: str = ""
    committer_email: str = ""
    trailers: list[str] = []
    no_check_mergeable: bool = False
    no_auto_trailer_patch: bool = False
    push: bool = False


class MergeResult(BaseModel):
    trailers: list[str] = []
    applied: list[str] = []  # 적용한 패치 제목
    issues: list[str] = []  # 닫을 이슈 번호
    pushed: bool = False


def trailers_from_captures(captures: dict[str, list[str]]) -> list[str]:
    """
    병합 정책 평가에서 얻은 캡처를 트레일러로 변환하는 함수

    예: {"approved_by": ["Alice <alice@example.com>"]}
        -> ["Approved-by: Alice <alice@example.com>"]
    """
    trailers = []
    for key, values in captures.items():
        name = trailer_name_from_capture(key)
        for value in values:
            trailer = f"{name}: {value}"
            if trailer not in trailers:
                trailers.append(trailer)
    return trailers


def collect_issue_references(texts: list[str]) -> list[str]:
    """본문에서 (Closes|Fixes|Resolves): #N 형식의 이슈 번호를 중복 없이 모으는 함수"""
    issues = []
    for text in texts:
        for number in ISSUE_REFERENCE.findall(text or ""):
            if number not in issues:
                issues.append(number)
    return issues


def prepare_patch(patch: Patch, trailers: list[str]) -> Patch:
    """
    트레일러를 덧붙이고 본문의 '---'를 '...'로 바꾼 패치 사본을 만드는 함수

    본문의 '---'는 git am이 diff 시작으로 해석하므로 바꿔야 합니다.
    """
    prepared = patch.model_copy(deep=True)
    for trailer in trailers:
        prepared.add_trailer(trailer)
    prepared.message = prepared.message.replace("---", "...")
    return prepared


def merge_pull_request(
    client: GithubClient,
    org: str,
    repo: str,
    number: int,
    policy: MergePolicy,
    options: MergeOptions,
    workdir: str | Path,
    token: str = "",
    user: str = "",
    dry_run: bool = False,
) -> MergeResult:
    """
    PR을 병합하는 함수

    Args:
        client: GitHub 클라이언트
        org: Organization 이름
        repo: 리포지토리 이름
        number: PR 번호
        policy: 병합 정책
        options: 병합 옵션
        workdir: 작업 디렉토리
        token: git push와 gh에 사용할 토큰
        user: git 클론에 사용할 사용자명
        dry_run: True이면 패치 적용까지만 하고 push, 라벨 변경, 이슈 닫기를 하지 않음

    Returns:
        MergeResult: 병합 결과

    Raises:
        MergeError: 병합 정책을 만족하지 않거나 패치를 적용할 수 없는 경우
    """
    pr = client.get_pull_request(org, repo, number)
    trailers = list(options.trailers)

    if not options.no_check_mergeable:
        logger.info("PR이 병합 조건을 만족하는지 확인합니다")
        result = evaluate_merge_requirements(
            pr,
            client.list_issue_comments(pr),
            client.list_reviews(pr),
            policy,
            client.is_team_member,
        )
        if not result.ok:
            raise MergeError(f"pull request is not mergeable: {result.reason}")

        if not options.no_auto_trailer_patch:
            trailers += trailers_from_captures(result.captures)

    trailers.append(f"GitHub-Closes: #{number}")
    if os.getenv("GITHUB_ACTIONS") == "true":
        trailers.append(GITHUB_ACTIONS_TRAILER)

    workdir = Path(workdir)
    base_branch = options.base_branch or pr.base.ref

    checkout = PullRequestCheckout(
        org, repo, number, base_branch, pr.commits, workdir, user=user, token=token
    )
    try:
        patches = checkout.prepare()
    except GitError as e:
        raise MergeError(f"could not prepare pull request: {e}") from e

    repo_path = Path(options.repo_path) if options.repo_path else workdir / f"{repo}-pr-{number}-patched"

    try:
        if not repo_path.exists():
            logger.info("새 리포지토리 클론: %s -> %s", checkout.origin, repo_path)
            run_git("clone", "--branch", base_branch, checkout.clone_url(), str(repo_path))

        if options.committer_name:
            run_git("-C", str(repo_path), "config", "user.name", options.committer_name)
        if options.committer_email:
            run_git("-C", str(repo_path), "config", "user.email", options.committer_email)

        run_git("-C", str(repo_path), "checkout", base_branch)

        applied = []
        for patch in patches:
            logger.info("패치 적용: %s", patch.title)
            prepared = prepare_patch(patch, trailers)
            try:
                run_git("-C", str(repo_path), "am", "--3way", stdin=str(prepared))
            except GitError:
                logger.warning("패치 적용 실패, git am 중단: %s", patch.title)
                run_command(["git", "-C", str(repo_path), "am", "--abort"], check=False)
                raise
            applied.append(patch.title)
    except GitError as e:
        raise MergeError(f"could not apply patch: {e}") from e

    issues = collect_issue_references([pr.body or ""] + [p.message for p in patches])
    merge_result = MergeResult(trailers=trailers, applied=applied, issues=issues)

    if dry_run or not options.push:
        return merge_result

    logger.info("원격 저장소로 push")
    try:
        run_git("-C", str(repo_path), "push", "origin", base_branch)
    except GitError as e:
        raise MergeError(f"could not push {base_branch}: {e}") from e
    merge_result.pushed = True

    full_repo = f"{org}/{repo}"
    logger.info("'%s' 라벨 제거, '%s' 라벨 추가", MERGE_LABEL, MERGED_LABEL)
    try:
        run_gh(
            "pr", "edit", str(number),
            "--remove-label", MERGE_LABEL,
            "--add-label", MERGED_LABEL,
            "-R", full_repo,
            token=token,
        )
    except GitError as e:
        logger.error("라벨을 '%s'에서 '%s'로 바꿀 수 없습니다: %s", MERGE_LABEL, MERGED_LABEL, e)

    for issue in issues:
        logger.info("관련 이슈 닫기: #%s", issue)
        try:
            run_gh(
                "issue", "close", issue,
                "--reason", "completed",
                "--comment", f"This issue was closed by PR number #{number} which was merged successfully.",
                "-R", full_repo,
                token=token,
            )
        except GitError as e:
            raise MergeError(f"could not close issue #{issue}: {e}") from e

    return merge_result
