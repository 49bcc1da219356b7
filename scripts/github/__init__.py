"""
GitHub Organization 거버넌스 스크립트 모음

이 패키지는 팀, 라벨, 리뷰어 배정, PR 병합을 선언적 정의에 맞춰 관리하는 스크립트를 제공합니다.
각 스크립트는 단독으로 실행하거나 governctl 명령의 하위 명령으로 실행할 수 있습니다.

스크립트 목록:
- sync_teams.py: teams/ 정의를 Organization 팀과 구성원에 동기화 (governctl team sync)
- sync_labels.py: 변경된 파일에 맞는 라벨을 PR에 추가 (governctl pr sync labels)
- sync_reviewers.py: 작업량 기준으로 담당자와 리뷰어 배정 (governctl pr sync reviewers)
- check_mergeable.py: PR이 병합 정책을 만족하는지 확인 (governctl pr check mergeable)
- check_patch.py: PR 커밋에 checkpatch.pl 실행 (governctl pr check patch)
- merge_pr.py: 승인 트레일러를 붙여 PR 병합 (governctl pr merge)

사용 전 필수 환경변수:
- GOVERN_GITHUB_TOKEN: GitHub Personal Access Token
- GOVERN_GITHUB_ORG: 대상 Organization 이름 (기본값: unikraft)

그 밖의 전역 옵션도 GOVERN_<옵션 이름> 환경변수로 지정할 수 있습니다.
(예: GOVERN_DRY_RUN, GOVERN_TEAMS_DIR, GOVERN_MIN_APPROVALS)

변경을 만드는 스크립트는 모두 --dry-run 옵션을 지원합니다.
"""
