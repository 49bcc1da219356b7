"""
CODEOWNERS 파서 테스트
"""

from service.codeowners import CodeOwners

CONTENT = """
# 기본 소유자
*                       @unikraft/sig-core

/lib/                   @unikraft/sig-lib
/lib/uknetdev/          @unikraft/sig-net @alice  # 네트워크
*.md                    @unikraft/sig-docs
Makefile.uk
"""


def test_last_matching_rule_wins():
    owners = CodeOwners.parse(CONTENT)

    assert owners.owners("lib/uknetdev/netdev.c") == ["@unikraft/sig-net", "@alice"]
    assert owners.owners("lib/ukboot/boot.c") == ["@unikraft/sig-lib"]
    assert owners.owners("plat/kvm/setup.c") == ["@unikraft/sig-core"]


def test_unanchored_pattern_matches_any_depth():
    owners = CodeOwners.parse(CONTENT)

    assert owners.owners("lib/ukboot/README.md") == ["@unikraft/sig-docs"]


def test_rule_without_owners_clears_ownership():
    owners = CodeOwners.parse(CONTENT)

    assert owners.owners("lib/ukboot/Makefile.uk") == []


def test_comments_and_blank_lines_are_skipped():
    owners = CodeOwners.parse(CONTENT)

    assert len(owners.rules) == 5


def test_negated_pattern_is_matched_literally():
    owners = CodeOwners.parse(CONTENT + "!*.md                   @unikraft/sig-none\n")

    assert owners.owners("README.md") == ["@unikraft/sig-docs"]
    assert owners.owners("!notes.md") == ["@unikraft/sig-none"]
