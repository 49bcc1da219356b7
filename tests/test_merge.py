"""
PR 병합 테스트

git과 gh 실행은 Mock으로 대신하고, 어떤 명령이 어떤 순서로 실행되는지 확인합니다.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_comment, make_pr
from service.git import GitError
from service.merge import (
    MergeError,
    MergeOptions,
    collect_issue_references,
    merge_pull_request,
    prepare_patch,
    trailers_from_captures,
)
from service.mergeable import MergePolicy
from service.patch import Patch


def make_patch(title="lib/ukalloc: Fix alignment", message="\nFixes: #6\n"):
    return Patch.from_commit(
        hash="abc1234",
        raw_message=f"{title}\n{message}",
        author_name="Alice",
        author_email="alice@unikraft.io",
        author_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


def test_trailers_from_captures():
    captures = {
        "approved_by": ["Alice <alice@unikraft.io>", "Alice <alice@unikraft.io>"],
        "reviewed_by": ["Bob <bob@unikraft.io>"],
    }

    assert trailers_from_captures(captures) == [
        "Approved-by: Alice <alice@unikraft.io>",
        "Reviewed-by: Bob <bob@unikraft.io>",
    ]


def test_collect_issue_references():
    texts = ["Closes: #5\nFixes: #6", "Resolves: #5", None, "See #7"]

    assert collect_issue_references(texts) == ["5", "6"]


def test_prepare_patch_returns_copy():
    original = make_patch(message="\nKeep --- apart\n")

    prepared = prepare_patch(original, ["Approved-by: Bob <bob@unikraft.io>"])

    assert prepared.message == "\nKeep ... apart"
    assert prepared.trailers == ["Approved-by: Bob <bob@unikraft.io>"]
    assert original.trailers == []
    assert "---" in original.message


@pytest.fixture
def git(monkeypatch):
    """PullRequestCheckout, run_git, run_gh를 Mock으로 대체"""
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    with patch("service.merge.PullRequestCheckout") as checkout_cls, patch(
        "service.merge.run_git"
    ) as run_git, patch("service.merge.run_gh") as run_gh:
        checkout = checkout_cls.return_value
        checkout.prepare.return_value = [make_patch()]
        checkout.origin = "https://github.com/unikraft/unikraft.git"
        checkout.clone_url.return_value = "https://github.com/unikraft/unikraft.git"
        yield run_git, run_gh


def make_client(pr):
    client = MagicMock()
    client.get_pull_request.return_value = pr
    client.list_issue_comments.return_value = []
    client.list_reviews.return_value = [
        make_comment("alice", "Approved-by: Alice <alice@unikraft.io>", state="APPROVED"),
    ]
    return client


def pr_for_merge(**kwargs):
    pr = make_pr(number=1, assignees=["alice"], body="Closes: #5", **kwargs)
    pr.base.ref = "staging"
    pr.commits = 1
    return pr


def git_subcommands(run_git):
    return [call.args[2] if call.args[0] == "-C" else call.args[0] for call in run_git.call_args_list]


def test_merge_applies_patches_with_trailers(git, tmp_path):
    run_git, run_gh = git
    client = make_client(pr_for_merge())

    result = merge_pull_request(
        client,
        "unikraft",
        "unikraft",
        1,
        MergePolicy.build(min_reviews=0),
        MergeOptions(),
        tmp_path,
    )

    assert result.trailers == [
        "Approved-by: Alice <alice@unikraft.io>",
        "GitHub-Closes: #1",
    ]
    assert result.applied == ["lib/ukalloc: Fix alignment"]
    assert result.issues == ["5", "6"]
    assert not result.pushed

    assert git_subcommands(run_git) == ["clone", "checkout", "am"]
    mailbox = run_git.call_args_list[-1].kwargs["stdin"]
    assert "Approved-by: Alice <alice@unikraft.io>\nGitHub-Closes: #1\n---\n" in mailbox
    run_gh.assert_not_called()


def test_merge_rejects_unmergeable_pr(git, tmp_path):
    run_git, _ = git
    client = make_client(pr_for_merge())
    client.list_reviews.return_value = []

    with pytest.raises(MergeError, match="pull request is not mergeable"):
        merge_pull_request(
            client, "unikraft", "unikraft", 1, MergePolicy.build(min_reviews=0), MergeOptions(), tmp_path
        )

    run_git.assert_not_called()


def test_merge_without_checks_uses_given_trailers(git, tmp_path):
    client = make_client(pr_for_merge())
    options = MergeOptions(
        no_check_mergeable=True,
        trailers=["Reviewed-by: Carol <carol@unikraft.io>"],
        committer_name="Unikraft Bot",
    )

    result = merge_pull_request(
        client, "unikraft", "unikraft", 1, MergePolicy(), options, tmp_path
    )

    assert result.trailers == ["Reviewed-by: Carol <carol@unikraft.io>", "GitHub-Closes: #1"]
    client.list_reviews.assert_not_called()
    run_git, _ = git
    assert git_subcommands(run_git) == ["clone", "config", "checkout", "am"]


def test_merge_push_relabels_and_closes_issues(git, tmp_path):
    run_git, run_gh = git
    client = make_client(pr_for_merge())

    result = merge_pull_request(
        client,
        "unikraft",
        "unikraft",
        1,
        MergePolicy.build(min_reviews=0),
        MergeOptions(push=True),
        tmp_path,
        token="ghp_test",
    )

    assert result.pushed
    assert git_subcommands(run_git)[-1] == "push"
    assert run_git.call_args_list[-1].args[-2:] == ("origin", "staging")

    gh_calls = [call.args[:3] for call in run_gh.call_args_list]
    assert gh_calls == [("pr", "edit", "1"), ("issue", "close", "5"), ("issue", "close", "6")]
    assert all(call.kwargs["token"] == "ghp_test" for call in run_gh.call_args_list)


def test_merge_dry_run_does_not_push(git, tmp_path):
    run_git, run_gh = git
    client = make_client(pr_for_merge())

    result = merge_pull_request(
        client,
        "unikraft",
        "unikraft",
        1,
        MergePolicy.build(min_reviews=0),
        MergeOptions(push=True),
        tmp_path,
        dry_run=True,
    )

    assert not result.pushed
    assert "push" not in git_subcommands(run_git)
    run_gh.assert_not_called()


def test_merge_relabel_failure_is_not_fatal(git, tmp_path):
    _, run_gh = git
    run_gh.side_effect = [GitError("gh pr edit 실패"), "", ""]
    client = make_client(pr_for_merge())

    result = merge_pull_request(
        client,
        "unikraft",
        "unikraft",
        1,
        MergePolicy.build(min_reviews=0),
        MergeOptions(push=True),
        tmp_path,
    )

    assert result.pushed
    assert run_gh.call_count == 3


def test_merge_patch_conflict(git, tmp_path):
    run_git, _ = git
    run_git.side_effect = ["", "", GitError("git am 실패")]
    client = make_client(pr_for_merge())

    with patch("service.merge.run_command") as run_command, pytest.raises(
        MergeError, match="could not apply patch"
    ):
        merge_pull_request(
            client, "unikraft", "unikraft", 1, MergePolicy.build(min_reviews=0), MergeOptions(), tmp_path
        )

    run_command.assert_called_once_with(
        ["git", "-C", str(tmp_path / "unikraft-pr-1-patched"), "am", "--abort"], check=False
    )
