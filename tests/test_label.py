"""
라벨 정의와 glob 규칙 테스트
"""

import pytest
import yaml

from service.config import ConfigError
from service.label import Label, dump_labels, glob_match, load_labels


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        ("*.md", "README.md", True),
        ("*.md", "docs/README.md", False),
        ("lib/**/*.c", "lib/foo.c", True),
        ("lib/**/*.c", "lib/net/ipv4/tcp.c", True),
        ("lib/**/*.c", "lib/foo.h", False),
        ("**/Makefile", "Makefile", True),
        ("**/Makefile", "plat/kvm/Makefile", True),
        ("docs/**", "docs/README.md", True),
        ("docs/**", "docs/guide/intro.md", True),
        ("docs/**", "documentation/intro.md", False),
        ("plat/?vm/*", "plat/kvm/setup.c", True),
        ("plat/?vm/*", "plat/xen/setup.c", False),
        ("src/[!t]*.py", "src/main.py", True),
        ("src/[!t]*.py", "src/test.py", False),
        ("{lib,plat}/*.c", "plat/io.c", True),
        ("{lib,plat}/*.c", "arch/io.c", False),
        ("**/*.yml", ".github/workflows/ci.yml", True),
    ],
)
def test_glob_match(pattern, path, expected):
    assert glob_match(pattern, path) is expected


def test_applies_to_filters_by_repo():
    label = Label(
        name="area/lib",
        apply_on_pr_match_repos=["unikraft"],
        apply_on_pr_match_paths=["lib/**"],
    )

    assert label.applies_to("unikraft", "lib/ukdebug/print.c")
    assert not label.applies_to("app-nginx", "lib/ukdebug/print.c")


def test_applies_to_without_paths_never_matches():
    """경로 규칙이 없는 라벨은 어떤 파일에도 적용되지 않음"""
    label = Label(name="kind/docs", apply_on_pr_match_repos=["unikraft"])

    assert not label.applies_to("unikraft", "README.md")


def test_load_labels_reads_files_in_name_order(write_yaml, tmp_path):
    write_yaml(
        "labels/b.yaml",
        """
labels:
  - name: area/plat
    color: "1d76db"
    apply_on_pr_match_paths: ["plat/**"]
""",
    )
    write_yaml(
        "labels/a.yaml",
        """
labels:
  - name: area/lib
    color: 000000
    apply_on_pr_match_paths: ["lib/**"]
  - name: kind/docs
    apply_on_pr_match_paths: ["*.md", "docs/**"]
""",
    )

    labels = load_labels(tmp_path / "labels")

    assert [label.name for label in labels] == ["area/lib", "kind/docs", "area/plat"]
    # YAML이 정수로 읽은 색상도 6자리 문자열로 유지
    assert labels[0].color == "000000"
    assert labels[2].color == "1d76db"


def test_load_labels_rejects_label_without_name(write_yaml, tmp_path):
    write_yaml("labels/bad.yaml", "labels:\n  - color: ffffff\n")

    with pytest.raises(ConfigError, match="라벨 이름이 없습니다"):
        load_labels(tmp_path / "labels")


def test_load_labels_missing_directory(tmp_path):
    with pytest.raises(ConfigError):
        load_labels(tmp_path / "nope")


def test_dump_labels_preserves_definition(write_yaml, tmp_path):
    write_yaml(
        "labels/labels.yaml",
        """
labels:
  - name: area/lib
    color: "e11d21"
    apply_on_pr_match_paths: ["lib/**", "include/uk/*.h"]
""",
    )

    labels = load_labels(tmp_path / "labels")
    data = yaml.safe_load(dump_labels(labels))

    assert data["labels"][0]["name"] == "area/lib"
    assert data["labels"][0]["color"] == "e11d21"
    assert data["labels"][0]["apply_on_pr_match_paths"] == ["lib/**", "include/uk/*.h"]
