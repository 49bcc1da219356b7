"""
governctl - GitHub Organization 거버넌스 명령

사용법:
    governctl [전역 옵션] team sync
    governctl [전역 옵션] pr sync labels ORG/REPO/ID
    governctl [전역 옵션] pr sync reviewers ORG/REPO[/ID]
    governctl [전역 옵션] pr check mergeable [정책 옵션] ORG/REPO/ID
    governctl [전역 옵션] pr check patch ORG/REPO/ID
    governctl [전역 옵션] pr merge [옵션] [정책 옵션] ORG/REPO/ID

전역 옵션은 GOVERN_* 환경변수 또는 .env 파일로도 지정할 수 있습니다.
"""
import argparse
import sys

from scripts.github import (
    check_mergeable,
    check_patch,
    merge_pr,
    sync_labels,
    sync_reviewers,
    sync_teams,
)
from scripts.github.common import add_global_arguments, execute


def _add_command(subparsers, name: str, module, help_text: str) -> None:
    parser = subparsers.add_parser(name, help=help_text, description=help_text)
    module.add_arguments(parser)
    parser.set_defaults(func=module.run)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="governctl",
        description="GitHub Organization의 팀, 라벨, 리뷰어, PR 병합을 관리합니다.",
    )
    add_global_arguments(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    team = commands.add_parser("team", help="팀 관리").add_subparsers(dest="team_command", required=True)
    _add_command(team, "sync", sync_teams, "팀 정의를 Organization에 동기화합니다.")

    pr = commands.add_parser("pr", help="PR 관리").add_subparsers(dest="pr_command", required=True)

    pr_sync = pr.add_parser("sync", help="PR 라벨/리뷰어 동기화").add_subparsers(
        dest="sync_command", required=True
    )
    _add_command(pr_sync, "labels", sync_labels, "변경된 파일에 맞는 라벨을 PR에 추가합니다.")
    _add_command(pr_sync, "reviewers", sync_reviewers, "PR에 담당자와 리뷰어를 배정합니다.")

    pr_check = pr.add_parser("check", help="PR 검사").add_subparsers(dest="check_command", required=True)
    _add_command(pr_check, "mergeable", check_mergeable, "PR이 병합 정책을 만족하는지 확인합니다.")
    _add_command(pr_check, "patch", check_patch, "PR 커밋에 checkpatch.pl을 실행합니다.")

    _add_command(pr, "merge", merge_pr, "PR을 병합 정책에 따라 병합합니다.")

    return parser


def main():
    args = build_parser().parse_args()
    sys.exit(execute(args.func, args))


if __name__ == "__main__":
    main()
