"""
PR에 담당자(유지보수자)와 리뷰어를 작업량 기준으로 배정하는 스크립트

사용법:
    python scripts/github/sync_reviewers.py [--dry-run] [-A N] [-R N] ORG/REPO[/ID]

옵션:
    --dry-run: 실제 변경 없이 누가 배정될지 확인
    -A, --num-maintainers: PR당 배정할 담당자 수 (기본값: 1)
    -R, --num-reviewers: PR당 배정할 리뷰어 수 (기본값: 1)

PR 번호를 생략하면 리포지토리의 모든 열린 PR에 배정합니다.
"""
import argparse
import os
import sys

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scripts.github.common import (
    add_global_arguments,
    execute,
    get_github_client,
    parse_repo_reference,
)
from service.assignment import AssignmentError, ReviewerAssigner
from service.config import Config
from service.team import load_teams


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-A", "--num-maintainers", type=int, default=1,
        help="PR당 배정할 담당자 수 (기본값: 1)",
    )
    parser.add_argument(
        "-R", "--num-reviewers", type=int, default=1,
        help="PR당 배정할 리뷰어 수 (기본값: 1)",
    )
    parser.add_argument("pr", nargs="*", help="ORG/REPO, ORG/REPO/ID 또는 PR URL")


def run(config: Config, args: argparse.Namespace) -> int:
    org, repo, number = parse_repo_reference(args.pr)
    teams = load_teams(config.teams_dir)

    client = get_github_client(config)
    assigner = ReviewerAssigner(
        client,
        org,
        repo,
        teams,
        num_maintainers=args.num_maintainers,
        num_reviewers=args.num_reviewers,
        dry_run=config.dry_run,
    )

    open_prs = client.list_open_pull_requests(org, repo)
    assigner.load_workloads(open_prs)

    if number is None:
        targets = open_prs
    else:
        targets = [client.get_pull_request(org, repo, number)]

    print(f"리포지토리: {org}/{repo}")
    print(f"대상 PR: {len(targets)}개")
    print("-" * 50)

    success_count = 0
    skip_count = 0
    error_count = 0

    for pr in targets:
        try:
            result = assigner.assign(pr)
        except AssignmentError as e:
            print(f"[ERROR] #{pr.number}: {e}")
            error_count += 1
            continue

        if not result.new_assignees and not result.new_reviewers:
            print(f"[SKIP] #{pr.number}: 이미 담당자와 리뷰어가 있음")
            skip_count += 1
            continue

        summary = (
            f"담당자 {', '.join(result.assignees) or '-'}, "
            f"리뷰어 {', '.join(result.reviewers) or '-'}"
        )
        if config.dry_run:
            print(f"[DRY-RUN] #{pr.number}: 배정 예정 ({summary})")
        else:
            print(f"[SUCCESS] #{pr.number}: 배정 완료 ({summary})")
        success_count += 1

    print("-" * 50)
    print(f"완료: 성공 {success_count}, 스킵 {skip_count}, 오류 {error_count}")
    return 1 if error_count else 0


def main():
    parser = argparse.ArgumentParser(
        description="PR에 담당자와 리뷰어를 작업량 기준으로 배정합니다."
    )
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
