"""
스크립트 공통 유틸리티 테스트
"""

import argparse
import json

import pytest
import yaml

from scripts.github.common import (
    add_policy_arguments,
    execute,
    parse_pr_reference,
    parse_repo_reference,
    policy_from_args,
    render,
)
from service.config import ConfigError
from service.team_sync import TeamSyncError


class TestParsePrReference:
    def test_org_repo_id(self):
        assert parse_pr_reference(["unikraft/unikraft/1000"], env={}) == ("unikraft", "unikraft", 1000)

    def test_pull_request_url(self):
        ref = parse_pr_reference(["https://github.com/unikraft/lib-lwip/pull/42"], env={})

        assert ref == ("unikraft", "lib-lwip", 42)

    def test_repo_url_and_id(self):
        ref = parse_pr_reference(["https://github.com/unikraft/unikraft", "7"], env={})

        assert ref == ("unikraft", "unikraft", 7)

    def test_github_actions_environment(self):
        env = {
            "GITHUB_ACTIONS": "true",
            "GITHUB_REPOSITORY": "unikraft/unikraft",
            "GITHUB_REF": "refs/pull/55/merge",
        }

        assert parse_pr_reference([], env=env) == ("unikraft", "unikraft", 55)

    def test_github_actions_branch_ref(self):
        env = {
            "GITHUB_ACTIONS": "true",
            "GITHUB_REPOSITORY": "unikraft/unikraft",
            "GITHUB_REF": "refs/heads/staging",
        }

        with pytest.raises(ValueError, match="GITHUB_REF"):
            parse_pr_reference([], env=env)

    @pytest.mark.parametrize(
        "args",
        [
            [],
            ["unikraft/unikraft"],
            ["unikraft/unikraft/abc"],
            ["https://gitlab.com/unikraft/unikraft/pull/1"],
            ["https://github.com/unikraft/unikraft/issues/1"],
            ["https://github.com/unikraft/unikraft/pull/1", "2"],
        ],
    )
    def test_invalid(self, args):
        with pytest.raises(ValueError):
            parse_pr_reference(args, env={})


def test_parse_repo_reference_without_number():
    assert parse_repo_reference(["unikraft/lib-lwip"], env={}) == ("unikraft", "lib-lwip", None)
    assert parse_repo_reference(["unikraft/lib-lwip/3"], env={}) == ("unikraft", "lib-lwip", 3)


def parse_policy(argv, env=None):
    parser = argparse.ArgumentParser()
    add_policy_arguments(parser)
    return policy_from_args(parser.parse_args(argv), env=env or {})


def test_policy_defaults():
    policy = parse_policy([])

    assert policy.min_approvals == 1
    assert policy.approve_states == ["approve"]
    assert not policy.no_draft


def test_policy_from_arguments():
    policy = parse_policy(
        ["--min-approvals", "2", "--no-draft", "--labels", "merge", "--labels", "ready"]
    )

    assert policy.min_approvals == 2
    assert policy.no_draft
    assert policy.labels == ["merge", "ready"]


def test_policy_from_environment():
    env = {
        "GOVERN_MIN_REVIEWS": "0",
        "GOVERN_NO_CONFLICTS": "true",
        "GOVERN_IGNORE_LABELS": "ci/merged, wip",
    }

    policy = parse_policy([], env=env)

    assert policy.min_reviews == 0
    assert policy.no_conflicts
    assert policy.ignore_labels == ["ci/merged", "wip"]


def test_policy_arguments_override_environment():
    policy = parse_policy(["--min-reviews", "3"], env={"GOVERN_MIN_REVIEWS": "0"})

    assert policy.min_reviews == 3


def test_policy_invalid_regex():
    with pytest.raises(ConfigError):
        parse_policy(["--approver-comments", "(broken"])


ROWS = [{"commit": "abc1234", "level": "warning", "type": "LONG_LINE"}]


def test_render_json_and_yaml():
    assert json.loads(render(ROWS, "json")) == ROWS
    assert yaml.safe_load(render(ROWS, "yaml")) == ROWS


def test_render_table_headers():
    table = render(ROWS, "table")

    assert "COMMIT" in table.splitlines()[0]
    assert "LONG_LINE" in table


def test_render_html():
    assert render(ROWS, "html").startswith("<table>")


def test_execute_reports_handled_errors(capsys, monkeypatch):
    monkeypatch.delenv("GOVERN_LOG_LEVEL", raising=False)

    def run(config, args):
        raise TeamSyncError("parent team not found: sig-net")

    code = execute(run, argparse.Namespace())

    assert code == 1
    assert "[ERROR] parent team not found: sig-net" in capsys.readouterr().err


def test_execute_returns_run_exit_code(monkeypatch):
    monkeypatch.delenv("GOVERN_LOG_LEVEL", raising=False)

    assert execute(lambda config, args: 0, argparse.Namespace(dry_run=True)) == 0
