"""
GitHub API 관련 서비스 레이어입니다.

PyGithub 클라이언트를 감싸서 팀, 구성원, PR에 대한 요청을 한 곳에서 처리합니다.
요청은 하나씩 순서대로 보내며, 페이지네이션은 PyGithub의 PaginatedList가 처리합니다.
사용자 정보와 팀 소속 여부는 클라이언트 객체에 캐싱되며, 실행 한 번 동안만 유지됩니다.
"""

import logging

from github import Auth, Github, GithubException
from github.NamedUser import NamedUser
from github.Organization import Organization
from github.PullRequest import PullRequest
from github.Team import Team as GithubTeam

from service.codeowners import CODEOWNERS_PATHS
from service.team import strip_team_mention

logger = logging.getLogger(__name__)


class GithubError(RuntimeError):
    """GitHub API 요청이 실패한 경우 (어떤 대상에 대한 요청인지 포함)"""


def error_message(e: GithubException) -> str:
    """GithubException에서 사람이 읽을 수 있는 메시지를 꺼내는 함수"""
    if isinstance(e.data, dict):
        return e.data.get("message", str(e))
    return str(e)


class GithubClient:
    """
    GitHub Organization 관리용 클라이언트

    Args:
        github: PyGithub 클라이언트
        org_name: Organization 이름
    """

    def __init__(self, github: Github, org_name: str):
        self.github = github
        self.org_name = org_name
        self._org: Organization | None = None
        self._teams: dict[str, GithubTeam] = {}
        self._users: dict[str, NamedUser] = {}
        self._membership: dict[tuple[str, str], bool] = {}

    @classmethod
    def connect(
        cls,
        token: str,
        org_name: str,
        endpoint: str = "",
        skip_ssl: bool = False,
    ) -> "GithubClient":
        """
        토큰으로 GitHub에 연결하는 함수

        Args:
            token: GitHub Personal Access Token
            org_name: Organization 이름
            endpoint: GitHub Enterprise API 주소 (비어 있으면 github.com)
            skip_ssl: SSL 인증서 검증을 건너뛸지 여부

        Returns:
            GithubClient: 클라이언트
        """
        kwargs = {"auth": Auth.Token(token), "timeout": 30, "retry": None}
        if endpoint:
            kwargs["base_url"] = endpoint.rstrip("/")
        if skip_ssl:
            kwargs["verify"] = False
        return cls(Github(**kwargs), org_name)

    @property
    def org(self) -> Organization:
        if self._org is None:
            try:
                self._org = self.github.get_organization(self.org_name)
            except GithubException as e:
                if e.status == 404:
                    raise GithubError(
                        f"Organization '{self.org_name}'을 찾을 수 없습니다."
                    ) from e
                raise GithubError(
                    f"Organization을 가져올 수 없습니다: {error_message(e)}"
                ) from e
        return self._org

    # ------------------------------------------------------------------
    # 사용자
    # ------------------------------------------------------------------

    def find_user(self, username: str) -> NamedUser:
        """
        사용자 정보를 가져오는 함수 (캐싱)

        Raises:
            GithubError: 사용자를 찾을 수 없는 경우
        """
        if username not in self._users:
            try:
                self._users[username] = self.github.get_user(username)
            except GithubException as e:
                raise GithubError(
                    f"사용자를 찾을 수 없습니다: {username}: {error_message(e)}"
                ) from e
        return self._users[username]

    def is_team_member(self, username: str, team_name: str) -> bool:
        """
        사용자가 팀 구성원인지 확인하는 함수 (사용자/팀 단위로 캐싱)

        Args:
            username: GitHub 사용자명
            team_name: 팀 이름 또는 "@org/team" 멘션

        Returns:
            bool: 구성원이면 True, 팀이 없으면 False
        """
        team_name = strip_team_mention(team_name)
        key = (username, team_name)
        if key in self._membership:
            return self._membership[key]

        team = self.find_team(team_name)
        if team is None:
            logger.warning("팀을 찾을 수 없어 구성원이 아닌 것으로 처리합니다: %s", team_name)
            result = False
        else:
            try:
                result = team.has_in_members(self.find_user(username))
            except GithubException as e:
                raise GithubError(
                    f"팀 소속을 확인할 수 없습니다: @{self.org_name}/{team_name} "
                    f"{username}: {error_message(e)}"
                ) from e

        self._membership[key] = result
        return result

    # ------------------------------------------------------------------
    # 팀
    # ------------------------------------------------------------------

    def find_team(self, name: str) -> GithubTeam | None:
        """
        이름 또는 slug로 팀을 찾는 함수

        Returns:
            GithubTeam | None: 찾은 팀, 없으면 None
        """
        if name in self._teams:
            return self._teams[name]

        try:
            for team in self.org.get_teams():
                if team.name == name or team.slug == name:
                    self._teams[name] = team
                    return team
        except GithubException as e:
            raise GithubError(f"팀 목록을 가져올 수 없습니다: {error_message(e)}") from e

        return None

    def create_or_update_team(
        self,
        name: str,
        description: str,
        parent_team_id: int | None = None,
        privacy: str | None = None,
        repo_names: list[str] | None = None,
        permission: str | None = None,
    ) -> int:
        """
        팀이 없으면 만들고, 있으면 정보를 갱신하는 함수

        Args:
            name: 팀 이름
            description: 팀 설명
            parent_team_id: 부모 팀 ID (None이면 지정하지 않음)
            privacy: "closed" 또는 "secret"
            repo_names: 팀에 연결할 리포지토리 이름 목록
            permission: 리포지토리 권한 (None이면 GitHub 기본값)

        Returns:
            int: 팀 ID

        Raises:
            GithubError: 생성 또는 갱신에 실패한 경우
        """
        options = {"description": description}
        if parent_team_id is not None:
            options["parent_team_id"] = parent_team_id
        if privacy:
            options["privacy"] = privacy

        team = self.find_team(name)
        try:
            if team is None:
                logger.info("팀 생성: @%s/%s", self.org_name, name)
                team = self.org.create_team(name, **options)
            else:
                logger.info("팀 갱신: @%s/%s", self.org_name, name)
                team.edit(name, **options)
        except GithubException as e:
            raise GithubError(
                f"팀을 생성하거나 갱신할 수 없습니다: @{self.org_name}/{name}: {error_message(e)}"
            ) from e
        self._teams[name] = team

        for repo_name in repo_names or []:
            try:
                repo = self.org.get_repo(repo_name)
                if permission:
                    team.update_team_repository(repo, permission)
                else:
                    team.add_to_repos(repo)
            except GithubException as e:
                raise GithubError(
                    f"팀에 리포지토리를 연결할 수 없습니다: @{self.org_name}/{name} "
                    f"{repo_name}: {error_message(e)}"
                ) from e

        return team.id

    def _require_team(self, name: str) -> GithubTeam:
        team = self.find_team(name)
        if team is None:
            raise GithubError(f"팀을 찾을 수 없습니다: @{self.org_name}/{name}")
        return team

    def list_team_members(self, team_name: str) -> list[str]:
        team = self._require_team(team_name)
        try:
            return [member.login for member in team.get_members()]
        except GithubException as e:
            raise GithubError(
                f"팀 구성원 목록을 가져올 수 없습니다: @{self.org_name}/{team_name}: "
                f"{error_message(e)}"
            ) from e

    def add_team_member(self, team_name: str, username: str, role: str) -> None:
        team = self._require_team(team_name)
        try:
            team.add_membership(self.find_user(username), role=role)
        except GithubException as e:
            raise GithubError(
                f"사용자를 추가할 수 없습니다: {username}: {error_message(e)}"
            ) from e

    def remove_team_member(self, team_name: str, username: str) -> None:
        team = self._require_team(team_name)
        try:
            team.remove_membership(self.find_user(username))
        except GithubException as e:
            raise GithubError(
                f"사용자를 제거할 수 없습니다: {username}: {error_message(e)}"
            ) from e

    # ------------------------------------------------------------------
    # Pull Request
    # ------------------------------------------------------------------

    def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest:
        try:
            return self.github.get_repo(f"{org}/{repo}").get_pull(number)
        except GithubException as e:
            raise GithubError(
                f"PR을 가져올 수 없습니다: {org}/{repo}#{number}: {error_message(e)}"
            ) from e

    def list_open_pull_requests(self, org: str, repo: str) -> list[PullRequest]:
        try:
            return list(self.github.get_repo(f"{org}/{repo}").get_pulls(state="open"))
        except GithubException as e:
            raise GithubError(
                f"열린 PR 목록을 가져올 수 없습니다: {org}/{repo}: {error_message(e)}"
            ) from e

    def list_issue_comments(self, pr: PullRequest) -> list:
        try:
            return list(pr.get_issue_comments())
        except GithubException as e:
            raise GithubError(
                f"PR 댓글을 가져올 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e

    def list_reviews(self, pr: PullRequest) -> list:
        try:
            return list(pr.get_reviews())
        except GithubException as e:
            raise GithubError(
                f"PR 리뷰를 가져올 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e

    def list_requested_reviewers(self, pr: PullRequest) -> list[str]:
        """리뷰 요청을 받은 사용자명 목록 (팀 요청은 제외)"""
        try:
            users, _teams = pr.get_review_requests()
            return [user.login for user in users]
        except GithubException as e:
            raise GithubError(
                f"리뷰 요청 목록을 가져올 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e

    def list_changed_files(self, pr: PullRequest) -> list[str]:
        """
        PR에서 변경된 파일 경로 목록 (이름이 바뀐 파일은 이전 경로도 포함)
        """
        paths = []
        try:
            for file in pr.get_files():
                if file.previous_filename and file.previous_filename not in paths:
                    paths.append(file.previous_filename)
                if file.filename and file.filename not in paths:
                    paths.append(file.filename)
        except GithubException as e:
            raise GithubError(
                f"변경된 파일 목록을 가져올 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e
        return paths

    def get_codeowners(self, org: str, repo: str) -> str | None:
        """
        리포지토리의 CODEOWNERS 파일 내용을 가져오는 함수

        Returns:
            str | None: 파일 내용, 파일이 없으면 None
        """
        try:
            repository = self.github.get_repo(f"{org}/{repo}")
        except GithubException as e:
            raise GithubError(
                f"리포지토리를 가져올 수 없습니다: {org}/{repo}: {error_message(e)}"
            ) from e

        for path in CODEOWNERS_PATHS:
            try:
                return repository.get_contents(path).decoded_content.decode("utf-8")
            except GithubException as e:
                if e.status == 404:
                    continue
                raise GithubError(
                    f"CODEOWNERS를 가져올 수 없습니다: {org}/{repo}: {error_message(e)}"
                ) from e
        return None

    def add_assignees(self, pr: PullRequest, usernames: list[str]) -> None:
        try:
            pr.add_to_assignees(*usernames)
        except GithubException as e:
            raise GithubError(
                f"담당자를 지정할 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e

    def request_reviewers(self, pr: PullRequest, usernames: list[str]) -> None:
        try:
            pr.create_review_request(reviewers=usernames)
        except GithubException as e:
            raise GithubError(
                f"리뷰를 요청할 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e

    def add_labels(self, pr: PullRequest, labels: list[str]) -> None:
        try:
            pr.add_to_labels(*labels)
        except GithubException as e:
            raise GithubError(
                f"라벨을 추가할 수 없습니다: #{pr.number}: {error_message(e)}"
            ) from e
