"""
PR을 병합 정책에 따라 base 브랜치에 병합하는 스크립트

사용법:
    python scripts/github/merge_pr.py [옵션] [정책 옵션] ORG/REPO/ID

옵션:
    --base: 병합할 브랜치 (기본값: PR의 base 브랜치)
    -p, --repo: 패치를 적용할 로컬 리포지토리 경로 (기본값: 새로 클론)
    -n, --committer-name: 커미터 이름
    -e, --committer-email: 커미터 이메일
    -t, --trailer: 각 커밋에 추가할 트레일러 (여러 번 지정 가능)
    --no-check-mergeable: 병합 정책 확인 건너뛰기
    --no-auto-trailer-patch: 승인/리뷰 댓글에서 트레일러를 자동으로 만들지 않음
    --push: 병합한 브랜치를 원격 저장소로 push

예시:
    # push 없이 패치 적용만 확인
    python scripts/github/merge_pr.py --min-approvals 1 unikraft/unikraft/1000

    # 병합 후 push, 라벨 변경, 관련 이슈 닫기
    python scripts/github/merge_pr.py --push -n "Unikraft Bot" -e monkey@unikraft.io unikraft/unikraft/1000
"""
import argparse
import os
import sys

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scripts.github.common import (
    add_global_arguments,
    add_policy_arguments,
    execute,
    get_github_client,
    parse_pr_reference,
    policy_from_args,
    workdir,
)
from service.config import Config, parse_bool
from service.merge import MergeOptions, merge_pull_request


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--base", default=os.getenv("GOVERN_BASE_BRANCH", ""),
        help="병합할 브랜치 (기본값: PR의 base 브랜치)",
    )
    parser.add_argument(
        "-p", "--repo", dest="repo_path", default=os.getenv("GOVERN_REPO", ""),
        help="패치를 적용할 로컬 리포지토리 경로",
    )
    parser.add_argument(
        "-n", "--committer-name", default=os.getenv("GOVERN_COMMITTER_NAME", ""),
        help="커미터 이름",
    )
    parser.add_argument(
        "-e", "--committer-email", default=os.getenv("GOVERN_COMMITTER_EMAIL", ""),
        help="커미터 이메일",
    )
    parser.add_argument(
        "-t", "--trailer", dest="trailers", action="append", default=[],
        help="각 커밋에 추가할 트레일러 (예: 'Reviewed-by: Name <email>')",
    )
    parser.add_argument(
        "--no-check-mergeable", action="store_true",
        default=parse_bool(os.getenv("GOVERN_NO_CHECK_MERGEABLE", "")),
        help="병합 정책 확인 건너뛰기",
    )
    parser.add_argument(
        "--no-auto-trailer-patch", action="store_true",
        default=parse_bool(os.getenv("GOVERN_NO_AUTO_TRAILER_PATCH", "")),
        help="승인/리뷰 댓글에서 트레일러를 자동으로 만들지 않음",
    )
    parser.add_argument(
        "--push", action="store_true",
        default=parse_bool(os.getenv("GOVERN_PUSH", "")),
        help="병합한 브랜치를 원격 저장소로 push",
    )
    add_policy_arguments(parser)
    parser.add_argument("pr", nargs="*", help="ORG/REPO/ID 또는 PR URL")


def run(config: Config, args: argparse.Namespace) -> int:
    org, repo, number = parse_pr_reference(args.pr)
    policy = policy_from_args(args)
    options = MergeOptions(
        base_branch=args.base,
        repo_path=args.repo_path,
        committer_name=args.committer_name,
        committer_email=args.committer_email,
        trailers=args.trailers,
        no_check_mergeable=args.no_check_mergeable,
        no_auto_trailer_patch=args.no_auto_trailer_patch,
        push=args.push,
    )

    client = get_github_client(config)

    print(f"PR: {org}/{repo}#{number}")
    print("-" * 50)

    with workdir(config, "governctl-pr-merge-") as path:
        result = merge_pull_request(
            client,
            org,
            repo,
            number,
            policy,
            options,
            path,
            token=config.github_token,
            user=config.github_user,
            dry_run=config.dry_run,
        )

    for title in result.applied:
        print(f"  적용: {title}")
    for trailer in result.trailers:
        print(f"  트레일러: {trailer}")

    if config.dry_run:
        print(f"[DRY-RUN] #{number}: 패치 {len(result.applied)}개 적용 확인 (push 안 함)")
    elif result.pushed:
        closed = ", ".join(f"#{issue}" for issue in result.issues) or "-"
        print(f"[SUCCESS] #{number}: {options.base_branch or 'base'} 브랜치로 병합 완료 (닫은 이슈: {closed})")
    else:
        print(f"[SUCCESS] #{number}: 패치 {len(result.applied)}개 적용 완료 (--push 없음)")

    print("-" * 50)
    return 0


def main():
    parser = argparse.ArgumentParser(description="PR을 병합 정책에 따라 병합합니다.")
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
