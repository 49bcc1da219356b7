"""
PR의 각 커밋에 checkpatch.pl을 실행하는 스크립트

사용법:
    python scripts/github/check_patch.py [-o table|json|yaml|html] [--base BRANCH] ORG/REPO/ID

옵션:
    -o, --output: 출력 형식 (기본값: table)
    --checkpatch-script: checkpatch.pl 경로 (기본값: <리포지토리>/support/scripts/checkpatch.pl)
    --checkpatch-conf: .checkpatch.conf 경로 (기본값: <리포지토리>/.checkpatch.conf)
    --base: PR을 rebase할 브랜치 (기본값: PR의 base 브랜치)

커밋 메시지의 'Checkpatch-Ignore: TYPE1, TYPE2' 줄에 적힌 유형은 무시합니다.
경고나 오류가 하나라도 있으면 종료 코드 1로 끝납니다.
"""
import argparse
import os
import shutil
import sys

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scripts.github.common import (
    OUTPUT_FORMATS,
    add_global_arguments,
    execute,
    get_github_client,
    parse_pr_reference,
    render,
    workdir,
)
from service.checkpatch import CheckpatchError, NoteLevel, extract_ignores, run_checkpatch
from service.config import Config
from service.pull_request import PullRequestCheckout


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o", "--output", default=os.getenv("GOVERN_OUTPUT", "table"), choices=OUTPUT_FORMATS,
        help="출력 형식 (기본값: table)",
    )
    parser.add_argument(
        "--checkpatch-script", default=os.getenv("GOVERN_CHECKPATCH_SCRIPT", ""),
        help="checkpatch.pl 경로",
    )
    parser.add_argument(
        "--checkpatch-conf", default=os.getenv("GOVERN_CHECKPATCH_CONF", ""),
        help=".checkpatch.conf 경로",
    )
    parser.add_argument(
        "--base", default=os.getenv("GOVERN_BASE_BRANCH", ""),
        help="PR을 rebase할 브랜치",
    )
    parser.add_argument("pr", nargs="*", help="ORG/REPO/ID 또는 PR URL")


def github_annotation(note, commit: str) -> str:
    """GitHub Actions 경고/오류 주석 형식"""
    return (
        f"::{note.level.value} file={note.file},line={note.line},"
        f"title={note.type}::{commit[:7]}: {note.message}"
    )


def run(config: Config, args: argparse.Namespace) -> int:
    org, repo, number = parse_pr_reference(args.pr)

    client = get_github_client(config)
    pr = client.get_pull_request(org, repo, number)
    in_actions = os.getenv("GITHUB_ACTIONS") == "true"

    rows = []
    warnings = 0
    errors = 0

    with workdir(config, "governctl-pr-check-patch-") as path:
        checkout = PullRequestCheckout(
            org,
            repo,
            number,
            args.base or pr.base.ref,
            pr.commits,
            path,
            user=config.github_user,
            token=config.github_token,
        )
        patches = checkout.prepare()
        checkout.save_patches()

        ignores = []
        for patch in patches:
            for ignore in extract_ignores(patch.message):
                if ignore not in ignores:
                    ignores.append(ignore)

        script = args.checkpatch_script or str(
            checkout.local_repo / "support" / "scripts" / "checkpatch.pl"
        )
        if not (os.path.isfile(script) or shutil.which(script)):
            raise CheckpatchError(f"could not access checkpatch script at '{script}'")

        conf = args.checkpatch_conf or str(checkout.local_repo / ".checkpatch.conf")
        if not os.path.isfile(conf):
            raise CheckpatchError(f"could not access checkpatch configuration at '{conf}'")

        for patch in patches:
            for note in run_checkpatch(patch.filename, script=script, conf=conf, ignores=ignores):
                if note.level == NoteLevel.WARNING:
                    warnings += 1
                else:
                    errors += 1

                rows.append(
                    {
                        "commit": patch.hash[:7],
                        "level": note.level.value,
                        "type": note.type,
                        "message": note.message,
                        "file": note.file,
                        "line": note.line,
                    }
                )

                if in_actions and note.file and note.line > 0:
                    print(github_annotation(note, patch.hash))

    if not rows:
        print("✔ checkpatch passed")
        return 0

    if not in_actions:
        print(render(rows, args.output, max_width=None if config.no_render else 60))

    print(f"[ERROR] summary: checkpatch failed with {errors} errors and {warnings} warnings", file=sys.stderr)
    return 1


def main():
    parser = argparse.ArgumentParser(description="PR의 각 커밋에 checkpatch.pl을 실행합니다.")
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
