"""
PR 병합 가능 여부 평가

PR 상태, 라벨, 댓글, 리뷰를 병합 정책(MergePolicy)에 비추어 평가합니다.
승인 댓글 패턴의 이름 있는 캡처 그룹(예: approved_by)은 병합 시 트레일러로 사용됩니다.

정책을 만족하지 않는 경우는 예외가 아니라 ok=False인 MergeCheckResult로 반환합니다.
"""

import logging
import re
from collections.abc import Callable

from pydantic import BaseModel, PrivateAttr, model_validator

from service.config import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_APPROVER_COMMENTS = ["Approved-by: (?P<approved_by>.*>)"]
DEFAULT_REVIEWER_COMMENTS = ["Reviewed-by: (?P<reviewed_by>.*>)"]

# GitHub 리뷰 상태 -> 정책에서 쓰는 상태 이름
REVIEW_STATE_ALIASES = {
    "approved": "approve",
    "changes_requested": "request_changes",
    "commented": "comment",
}


def normalize_state(state: str) -> str:
    """리뷰 상태를 소문자 정책 상태 이름으로 변환 (예: APPROVED -> approve)"""
    state = (state or "").lower()
    return REVIEW_STATE_ALIASES.get(state, state)


class MergePolicy(BaseModel):
    """PR 병합 정책 (모든 기본값은 여기에서만 정의)"""

    states: list[str] = []  # 비어 있으면 open만 허용
    ignore_states: list[str] = []
    labels: list[str] = []  # 비어 있으면 모든 PR 허용
    ignore_labels: list[str] = []
    no_conflicts: bool = False
    no_draft: bool = False
    min_approvals: int = 1
    min_reviews: int = 1
    approver_comments: list[str] = DEFAULT_APPROVER_COMMENTS
    reviewer_comments: list[str] = DEFAULT_REVIEWER_COMMENTS
    approve_states: list[str] = ["approve"]
    review_states: list[str] = []
    approver_teams: list[str] = []
    reviewer_teams: list[str] = []
    no_respect_assignees: bool = False
    no_respect_reviewers: bool = False

    _approver_patterns: list[re.Pattern] = PrivateAttr(default_factory=list)
    _reviewer_patterns: list[re.Pattern] = PrivateAttr(default_factory=list)

    @model_validator(mode="after")
    def check_minimums(self) -> "MergePolicy":
        if self.min_approvals < 0 or self.min_reviews < 0:
            raise ValueError("최소 승인/리뷰 수는 0 이상이어야 합니다.")
        return self

    def model_post_init(self, __context) -> None:
        self._approver_patterns = _compile(self.approver_comments or DEFAULT_APPROVER_COMMENTS)
        self._reviewer_patterns = _compile(self.reviewer_comments or DEFAULT_REVIEWER_COMMENTS)

    @classmethod
    def build(cls, **values) -> "MergePolicy":
        """
        None인 값은 기본값으로 두고 정책을 생성하는 함수

        Raises:
            ConfigError: 정규식이 잘못되었거나 최소값이 음수인 경우
        """
        try:
            return cls(**{k: v for k, v in values.items() if v is not None})
        except ValueError as e:
            raise ConfigError(f"병합 정책이 잘못되었습니다: {e}") from e

    def requests_state(self, state: str) -> bool:
        if self.states:
            allowed = state in self.states
        else:
            allowed = state == "open"
        return allowed and state not in self.ignore_states

    def requests_labels(self, labels: list[str]) -> bool:
        if self.labels and not any(label in labels for label in self.labels):
            return False
        return not any(label in labels for label in self.ignore_labels)

    def requests_approve_state(self, state: str) -> bool:
        return _state_allowed(state, self.approve_states)

    def requests_review_state(self, state: str) -> bool:
        return _state_allowed(state, self.review_states)

    def match_approver(self, body: str) -> dict[str, str] | None:
        return _match(self._approver_patterns, body)

    def match_reviewer(self, body: str) -> dict[str, str] | None:
        return _match(self._reviewer_patterns, body)


def _compile(patterns: list[str]) -> list[re.Pattern]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ConfigError(f"정규식이 잘못되었습니다: {pattern}: {e}") from e
    return compiled


def _state_allowed(state: str, allowed: list[str]) -> bool:
    if not allowed:
        return True
    return normalize_state(state) in [normalize_state(s) for s in allowed]


def _match(patterns: list[re.Pattern], body: str) -> dict[str, str] | None:
    """
    본문이 패턴 중 하나라도 일치하면 이름 있는 캡처를 모아 반환 (일치하지 않으면 None)
    """
    matched = False
    captures: dict[str, str] = {}
    for pattern in patterns:
        m = pattern.search(body or "")
        if m is None:
            continue
        matched = True
        for key, value in m.groupdict().items():
            if value is not None:
                captures[key] = value
    return captures if matched else None


class MergeCheckResult(BaseModel):
    """병합 가능 여부 평가 결과"""

    ok: bool
    reason: str = ""
    captures: dict[str, list[str]] = {}
    approvals: int = 0
    reviews: int = 0


def _login(obj) -> str:
    user = getattr(obj, "user", None)
    return user.login if user is not None else ""


def evaluate_merge_requirements(
    pr,
    comments: list,
    reviews: list,
    policy: MergePolicy,
    is_team_member: Callable[[str, str], bool],
) -> MergeCheckResult:
    """
    PR이 병합 정책을 만족하는지 평가하는 함수

    Args:
        pr: PyGithub PullRequest (state, draft, mergeable, labels, assignees 사용)
        comments: PR 이슈 댓글 목록 (body, user.login)
        reviews: PR 리뷰 목록 (body, state, user.login)
        policy: 병합 정책
        is_team_member: (사용자명, 팀 이름) -> 팀 소속 여부

    Returns:
        MergeCheckResult: 평가 결과 (정책 불만족 시 ok=False와 사유)
    """
    if not policy.requests_state(pr.state):
        want = policy.states or ["open"]
        return MergeCheckResult(
            ok=False,
            reason=f"pull request does not match requested state: got '{pr.state}' want {want}",
        )

    label_names = [label.name for label in pr.labels]
    if not policy.requests_labels(label_names):
        return MergeCheckResult(
            ok=False,
            reason=(
                f"pull request does not have requested labels: got {label_names} "
                f"want {policy.labels} ignore {policy.ignore_labels}"
            ),
        )

    if policy.no_conflicts:
        # None: GitHub가 아직 병합 가능 여부를 계산하지 않음
        if pr.mergeable is None:
            return MergeCheckResult(
                ok=False, reason="pull request mergeability has not been computed yet"
            )
        if not pr.mergeable:
            return MergeCheckResult(ok=False, reason="pull request has merge conflicts")

    if policy.no_draft and pr.draft:
        return MergeCheckResult(ok=False, reason="pull request is in draft state")

    assignees = [user.login for user in pr.assignees]

    def is_approver(username: str) -> bool:
        if not policy.no_respect_assignees and username in assignees:
            return True
        return any(is_team_member(username, team) for team in policy.approver_teams)

    def is_reviewer(username: str) -> bool:
        # 기본값에서는 리뷰를 남긴 모든 사용자를 리뷰어로 인정
        if not policy.no_respect_reviewers:
            return True
        return any(is_team_member(username, team) for team in policy.reviewer_teams)

    captures: dict[str, list[str]] = {}
    approvals = 0
    review_count = 0

    def record(matches: dict[str, str]) -> None:
        for key, value in matches.items():
            captures.setdefault(key, []).append(value)

    # (본문, 작성자, 승인 상태 확인용 상태, 리뷰 상태 확인 여부)
    entries = [(c.body, _login(c), "comment", False) for c in comments]
    entries += [(r.body, _login(r), r.state, True) for r in reviews]

    for body, author, state, is_formal in entries:
        matches = policy.match_approver(body)
        if matches is not None and is_approver(author) and policy.requests_approve_state(state):
            record(matches)
            approvals += 1

        matches = policy.match_reviewer(body)
        if matches is not None and is_reviewer(author):
            # 일반 댓글에는 리뷰 상태 필터를 적용하지 않음
            if not is_formal or policy.requests_review_state(state):
                record(matches)
                review_count += 1

    logger.info(
        "approvers (%d/%d) and reviewers (%d/%d)",
        approvals,
        policy.min_approvals,
        review_count,
        policy.min_reviews,
    )

    if approvals < policy.min_approvals or review_count < policy.min_reviews:
        return MergeCheckResult(
            ok=False,
            reason=(
                "pull request does not meet the minimum number approvers "
                f"({approvals}/{policy.min_approvals}) and reviewers "
                f"({review_count}/{policy.min_reviews})"
            ),
            captures=captures,
            approvals=approvals,
            reviews=review_count,
        )

    return MergeCheckResult(
        ok=True, captures=captures, approvals=approvals, reviews=review_count
    )
