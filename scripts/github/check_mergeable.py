"""
PR이 병합 정책을 만족하는지 확인하는 스크립트

사용법:
    python scripts/github/check_mergeable.py [정책 옵션] ORG/REPO/ID

예시:
    # 승인 2개, 리뷰 1개 이상이고 draft가 아닌 PR인지 확인
    python scripts/github/check_mergeable.py --min-approvals 2 --no-draft unikraft/unikraft/1000

정책을 만족하지 않으면 종료 코드 1로 끝납니다.
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
)
from service.config import Config
from service.mergeable import evaluate_merge_requirements
from service.merge import trailers_from_captures


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_policy_arguments(parser)
    parser.add_argument("pr", nargs="*", help="ORG/REPO/ID 또는 PR URL")


def run(config: Config, args: argparse.Namespace) -> int:
    org, repo, number = parse_pr_reference(args.pr)
    policy = policy_from_args(args)

    client = get_github_client(config)
    pr = client.get_pull_request(org, repo, number)

    result = evaluate_merge_requirements(
        pr,
        client.list_issue_comments(pr),
        client.list_reviews(pr),
        policy,
        client.is_team_member,
    )

    print(f"PR: {org}/{repo}#{number}")
    print(
        f"승인 {result.approvals}/{policy.min_approvals}, "
        f"리뷰 {result.reviews}/{policy.min_reviews}"
    )
    print("-" * 50)

    if not result.ok:
        print(f"[ERROR] #{number}: {result.reason}", file=sys.stderr)
        return 1

    print(f"[SUCCESS] #{number}: 병합 가능")
    for trailer in trailers_from_captures(result.captures):
        print(f"  {trailer}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="PR이 병합 정책을 만족하는지 확인합니다.")
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
