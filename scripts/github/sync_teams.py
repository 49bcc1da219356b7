"""
팀 정의를 GitHub Organization에 동기화하는 스크립트

사용법:
    python scripts/github/sync_teams.py [--dry-run] [--teams-dir DIR] [--repos-dir DIR]

옵션:
    --dry-run: 실제 변경 없이 어떤 팀과 구성원이 변경될지 확인
    --teams-dir: 팀 정의 디렉토리 (기본값: teams)
    --repos-dir: 리포지토리 정의 디렉토리 (기본값: repos, 없으면 건너뜀)
"""
import argparse
import logging
import os
import sys

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scripts.github.common import add_global_arguments, execute, get_github_client
from service.config import Config
from service.repo import load_repos
from service.team import load_teams, resolve_repos
from service.team_sync import TeamSyncError, sync_team

logger = logging.getLogger(__name__)


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """team sync 명령은 전역 옵션만 사용"""


def run(config: Config, args: argparse.Namespace) -> int:
    teams = load_teams(config.teams_dir)

    if os.path.isdir(config.repos_dir):
        resolve_repos(teams, load_repos(config.repos_dir, config.github_org))
    else:
        logger.info("리포지토리 정의 디렉토리가 없어 건너뜁니다: %s", config.repos_dir)

    client = get_github_client(config)

    print(f"Organization: {config.github_org}")
    print(f"팀 정의: {len(teams)}개 ({config.teams_dir})")
    print("-" * 50)

    success_count = 0
    skip_count = 0
    error_count = 0

    for team in teams:
        if team.has_synced:
            print(f"[SKIP] {team.fullname}: 하위 팀 동기화 중 이미 동기화됨")
            skip_count += 1
            continue

        try:
            sync_team(client, team, dry_run=config.dry_run)
        except TeamSyncError as e:
            print(f"[ERROR] {team.fullname}: {e}")
            error_count += 1
            continue

        if config.dry_run:
            print(f"[DRY-RUN] {team.fullname}: 동기화 예정")
        else:
            print(f"[SUCCESS] {team.fullname}: 동기화 완료")
        success_count += 1

    print("-" * 50)
    print(f"완료: 성공 {success_count}, 스킵 {skip_count}, 오류 {error_count}")
    return 1 if error_count else 0


def main():
    parser = argparse.ArgumentParser(description="팀 정의를 GitHub Organization에 동기화합니다.")
    add_global_arguments(parser)
    add_arguments(parser)
    args = parser.parse_args()

    sys.exit(execute(run, args))


if __name__ == "__main__":
    main()
