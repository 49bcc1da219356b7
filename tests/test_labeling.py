"""
PR 라벨 동기화 테스트
"""

from unittest.mock import MagicMock

import pytest

from conftest import make_pr
from service.github import GithubError
from service.label import Label
from service.labeling import LabelSyncError, matching_labels, sync_labels

LABELS = [
    Label(name="area/lib", apply_on_pr_match_paths=["lib/**"]),
    Label(name="area/plat", apply_on_pr_match_paths=["plat/**"]),
    Label(name="kind/docs", apply_on_pr_match_paths=["*.md", "doc/**"]),
    Label(name="lib-only", apply_on_pr_match_repos=["lib-lwip"], apply_on_pr_match_paths=["**"]),
]


def test_matching_labels_in_definition_order():
    names = matching_labels(LABELS, "unikraft", ["README.md", "lib/ukboot/boot.c"])

    assert names == ["area/lib", "kind/docs"]


def test_matching_labels_respects_repos():
    assert matching_labels(LABELS, "lib-lwip", ["src/core/tcp.c"]) == ["lib-only"]
    assert matching_labels(LABELS, "unikraft", ["src/core/tcp.c"]) == []


def test_sync_labels_adds_matching_labels():
    client = MagicMock()
    client.list_changed_files.return_value = ["plat/kvm/x86/setup.c"]
    pr = make_pr(number=7)

    names = sync_labels(client, pr, "unikraft", LABELS)

    assert names == ["area/plat"]
    client.add_labels.assert_called_once_with(pr, ["area/plat"])


def test_sync_labels_dry_run():
    client = MagicMock()
    client.list_changed_files.return_value = ["lib/ukalloc/alloc.c"]

    names = sync_labels(client, make_pr(), "unikraft", LABELS, dry_run=True)

    assert names == ["area/lib"]
    client.add_labels.assert_not_called()


def test_sync_labels_no_match_does_not_call_github():
    client = MagicMock()
    client.list_changed_files.return_value = ["Makefile.uk"]

    assert sync_labels(client, make_pr(), "unikraft", LABELS) == []
    client.add_labels.assert_not_called()


def test_sync_labels_rejects_closed_pr():
    with pytest.raises(LabelSyncError, match="closed"):
        sync_labels(MagicMock(), make_pr(state="closed"), "unikraft", LABELS)


def test_sync_labels_wraps_api_errors():
    client = MagicMock()
    client.list_changed_files.side_effect = GithubError("변경된 파일 목록을 가져올 수 없습니다")

    with pytest.raises(LabelSyncError, match="could not sync labels on #1"):
        sync_labels(client, make_pr(number=1), "unikraft", LABELS)
