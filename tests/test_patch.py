"""
패치 모델 테스트
"""

from datetime import datetime, timedelta, timezone

from service.patch import Patch, trailer_name_from_capture
from service.pull_request import patch_filename

MESSAGE = """lib/ukalloc: Fix alignment of large allocations

Large allocations were aligned to the page size only.

Signed-off-by: Alice <alice@unikraft.io>
GitHub-Fixes: #42

"""


def make_patch(**kwargs) -> Patch:
    values = {
        "hash": "0123456789abcdef",
        "raw_message": MESSAGE,
        "author_name": "Alice",
        "author_email": "alice@unikraft.io",
        "author_date": datetime(2024, 3, 1, 12, 30, tzinfo=timezone(timedelta(hours=1))),
        "stat": " lib/ukalloc/alloc.c | 2 +-",
        "diff": "diff --git a/lib/ukalloc/alloc.c b/lib/ukalloc/alloc.c\n",
    }
    values.update(kwargs)
    return Patch.from_commit(**values)


def test_from_commit_separates_trailers():
    patch = make_patch()

    assert patch.title == "lib/ukalloc: Fix alignment of large allocations"
    assert patch.message == "\nLarge allocations were aligned to the page size only."
    assert patch.trailers == ["Signed-off-by: Alice <alice@unikraft.io>", "GitHub-Fixes: #42"]
    assert patch.author_date == "Fri, 01 Mar 2024 12:30:00 +0100"


def test_add_trailer_skips_duplicates():
    patch = make_patch()
    patch.add_trailer("Approved-by: Bob <bob@unikraft.io>")
    patch.add_trailer("Approved-by: Bob <bob@unikraft.io>")

    assert patch.trailers[-1] == "Approved-by: Bob <bob@unikraft.io>"
    assert len(patch.trailers) == 3


def test_str_is_mailbox_format():
    text = str(make_patch())

    assert text.startswith("From 0123456789abcdef\nFrom: Alice <alice@unikraft.io>\n")
    assert "Subject: [PATCH] lib/ukalloc: Fix alignment of large allocations\n" in text
    assert "GitHub-Fixes: #42\n---\n lib/ukalloc/alloc.c | 2 +-\n" in text
    assert text.endswith("-- \n2.39.2\n\n")


def test_trailer_name_from_capture():
    assert trailer_name_from_capture("approved_by") == "Approved-by"
    assert trailer_name_from_capture("reviewed_by") == "Reviewed-by"


def test_patch_filename():
    assert patch_filename("lib/ukalloc: Fix `align`?") == "lib-ukalloc-Fix-align"
