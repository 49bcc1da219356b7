"""
PR에서 변경된 파일에 맞는 라벨을 PR에 추가하는 스크립트

사용법:
    python scripts/github/sync_labels.py [--dry-run] [--labels-dir DIR] ORG/REPO/ID

옵션:
    --dry-run: 실제 변경 없이 어떤 라벨이 추가될지 확인
    --labels-dir: 라벨 정의 디렉토리 (기본값: .github/labels)
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
    parse_pr_reference,
)
from service.config import Config
from service.label import load_labels
from service.labeling import sync_labels


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("pr", nargs="*", help="ORG/REPO/ID 또는 PR URL")


def run(config: Config, args: argparse.Namespace) -> int:
    org, repo, number = parse_pr_reference(args.pr)
    labels = load_labels(config.labels_dir)

    client = get_github_client(config)
    pr = client.get_pull_request(org, repo, number)

    print(f"PR: {org}/{repo}#{number}")
    print(f"라벨 정의: {len(labels)}개 ({config.labels_dir})")
    print("-" * 50)

    names = sync_labels(client, pr, repo, labels, dry_run=config.dry_run)

    if not names:
        print(f"[SKIP] #{number}: 적용할 라벨 없음")
    elif config.dry_run:
        print(f"[DRY-RUN] #{number}: 라벨 추가 예정 ({', '.join(names)})")
    else:
        print(f"[SUCCESS] #{number}: 라벨 추가 완료 ({', '.join(names)})")

    print("-" * 50)
    return 0


def main():
    parser = argparse.ArgumentParser(description="PR에서 변경된 파일에 맞는 라벨을 추가합니다.")
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
