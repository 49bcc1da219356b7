"""
PR 담당자(유지보수자) 및 리뷰어 배정

리포지토리를 소유한 팀(팀 정의의 repos, 변경된 파일의 CODEOWNERS)에서 후보를 모으고,
열린 PR 기준 작업량이 가장 적은 사람부터 배정합니다.

같은 PR에서 담당자와 리뷰어는 겹치지 않습니다.
"""

import logging

from pydantic import BaseModel

from service.codeowners import CodeOwners
from service.github import GithubError
from service.team import Team, find_team_by_name
from service.workload import Workload

logger = logging.getLogger(__name__)


class AssignmentError(RuntimeError):
    """PR에 담당자나 리뷰어를 배정할 수 없는 경우"""


class AssignmentResult(BaseModel):
    """PR 하나에 대한 배정 결과"""

    number: int
    assignees: list[str] = []  # 배정 후 전체 담당자
    reviewers: list[str] = []  # 배정 후 전체 리뷰어
    new_assignees: list[str] = []
    new_reviewers: list[str] = []


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


class ReviewerAssigner:
    """
    리포지토리 하나의 PR에 담당자와 리뷰어를 배정하는 클래스

    Args:
        client: GithubClient
        org: Organization 이름
        repo: 리포지토리 이름
        teams: 팀 정의 목록
        num_maintainers: PR당 배정할 담당자 수
        num_reviewers: PR당 배정할 리뷰어 수
        dry_run: True이면 GitHub를 변경하지 않음
    """

    def __init__(
        self,
        client,
        org: str,
        repo: str,
        teams: list[Team],
        num_maintainers: int = 1,
        num_reviewers: int = 1,
        dry_run: bool = False,
    ):
        self.client = client
        self.org = org
        self.repo = repo
        self.teams = teams
        self.num_maintainers = num_maintainers
        self.num_reviewers = num_reviewers
        self.dry_run = dry_run

        self.maintainer_workload = Workload()
        self.reviewer_workload = Workload()
        self._codeowners: CodeOwners | None = None
        self._codeowners_loaded = False

    def owning_teams(self) -> list[Team]:
        """팀 정의의 repos에 이 리포지토리가 있는 팀 목록"""
        return [team for team in self.teams if team.owns_repo(self.repo)]

    def load_workloads(self, open_prs: list) -> None:
        """
        모든 팀의 유지보수자/리뷰어를 0으로 등록한 뒤, 열린 PR의 담당자와 리뷰 요청 수를 세는 함수
        """
        for team in self.teams:
            self.maintainer_workload.seed(team.maintainer_handles())
            self.reviewer_workload.seed(team.reviewer_handles())

        for pr in open_prs:
            if pr.state != "open":
                continue

            assignees = [user.login for user in pr.assignees]
            reviewers = [user.login for user in pr.requested_reviewers]
            for handle in assignees:
                self.maintainer_workload.add(handle)
            for handle in reviewers:
                self.reviewer_workload.add(handle)

            logger.debug("열린 PR #%d: 담당자 %s, 리뷰어 %s", pr.number, assignees, reviewers)

        logger.info("담당자 작업량: %s", self.maintainer_workload.counts)
        logger.info("리뷰어 작업량: %s", self.reviewer_workload.counts)

    def codeowners(self) -> CodeOwners | None:
        if not self._codeowners_loaded:
            content = self.client.get_codeowners(self.org, self.repo)
            if content is not None:
                logger.info("리포지토리 CODEOWNERS 파싱")
                self._codeowners = CodeOwners.parse(content)
            self._codeowners_loaded = True
        return self._codeowners

    def teams_for(self, pr) -> list[Team]:
        """
        PR에 관련된 팀 목록 (리포지토리 소유 팀 + 변경된 파일의 CODEOWNERS 팀)
        """
        teams = self.owning_teams()

        codeowners = self.codeowners()
        if codeowners is None:
            return teams

        for path in self.client.list_changed_files(pr):
            for owner in codeowners.owners(path):
                team = find_team_by_name(owner, self.teams)
                if team is None or team in teams:
                    continue
                logger.info("CODEOWNERS에서 팀 추가: %s", team.fullname)
                teams.append(team)

        return teams

    def candidates(self, pr) -> tuple[list[str], list[str]]:
        """
        담당자 후보와 리뷰어 후보를 만드는 함수 (PR 작성자와 중복 제외)

        Returns:
            tuple[list[str], list[str]]: (유지보수자 후보, 리뷰어 후보)
        """
        author = pr.user.login
        maintainers: list[str] = []
        reviewers: list[str] = []

        for team in self.teams_for(pr):
            for handle in team.maintainer_handles():
                if handle != author:
                    _append_unique(maintainers, handle)
            for handle in team.reviewer_handles():
                if handle != author:
                    _append_unique(reviewers, handle)

        return maintainers, reviewers

    def _pop(self, workload: Workload, pool: list[str], count: int) -> list[str]:
        picked = []
        for _ in range(count):
            remaining = [handle for handle in pool if handle not in picked]
            if not remaining:
                break
            picked.append(workload.pop_least_stressed(remaining))
        return picked

    def assign(self, pr) -> AssignmentResult:
        """
        PR 하나에 담당자와 리뷰어를 배정하는 함수

        담당자가 없을 때만 담당자를, 리뷰와 리뷰 요청이 모두 없을 때만 리뷰어를 배정합니다.

        Args:
            pr: PyGithub PullRequest

        Returns:
            AssignmentResult: 배정 결과

        Raises:
            AssignmentError: PR이 닫혔거나, 후보가 없거나, GitHub 요청이 실패한 경우
        """
        if pr.state == "closed":
            raise AssignmentError(f"pull request #{pr.number} is closed")

        logger.info("%s/%s#%d에 담당자와 리뷰어 배정 중...", self.org, self.repo, pr.number)

        try:
            possible_maintainers, possible_reviewers = self.candidates(pr)
            result = AssignmentResult(
                number=pr.number, assignees=[user.login for user in pr.assignees]
            )

            if not result.assignees:
                if not possible_maintainers:
                    raise AssignmentError(
                        f"could not assign maintainers to #{pr.number}: no candidates"
                    )
                result.new_assignees = self._pop(
                    self.maintainer_workload, possible_maintainers, self.num_maintainers
                )
                result.assignees = list(result.new_assignees)
                for handle in result.new_assignees:
                    logger.info("담당자 배정: %s", handle)
                if not self.dry_run:
                    self.client.add_assignees(pr, result.new_assignees)

            # 담당자는 같은 PR의 리뷰어가 될 수 없음
            possible_reviewers = [
                handle for handle in possible_reviewers if handle not in result.assignees
            ]

            for review in self.client.list_reviews(pr):
                if review.user is not None:
                    _append_unique(result.reviewers, review.user.login)
            for handle in self.client.list_requested_reviewers(pr):
                _append_unique(result.reviewers, handle)

            if not result.reviewers:
                if not possible_reviewers:
                    raise AssignmentError(
                        f"could not assign reviewers to #{pr.number}: no candidates"
                    )
                result.new_reviewers = self._pop(
                    self.reviewer_workload, possible_reviewers, self.num_reviewers
                )
                result.reviewers = list(result.new_reviewers)
                for handle in result.new_reviewers:
                    logger.info("리뷰어 배정: %s", handle)
                if not self.dry_run:
                    self.client.request_reviewers(pr, result.new_reviewers)
        except GithubError as e:
            raise AssignmentError(f"could not assign #{pr.number}: {e}") from e

        return result
