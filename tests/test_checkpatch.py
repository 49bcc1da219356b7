"""
checkpatch.pl 출력 파싱 테스트
"""

from unittest.mock import MagicMock, patch

import pytest

from service.checkpatch import (
    CheckpatchError,
    NoteLevel,
    extract_ignores,
    parse_checkpatch_output,
    run_checkpatch,
)

OUTPUT = """\
WARNING:LONG_LINE: line length of 92 exceeds 80 columns
#25: FILE: lib/ukalloc/alloc.c:12:
+	very_long_function_call(argument_one, argument_two, argument_three);

ERROR:CODE_INDENT: code indent should use tabs where possible
#31: FILE: lib/ukalloc/alloc.c:18:
+        return 0;

WARNING:COMMIT_MESSAGE: Missing commit description - Add an appropriate one

total: 1 errors, 2 warnings, 40 lines checked
"""


def test_parse_checkpatch_output():
    notes = parse_checkpatch_output(OUTPUT)

    assert [(n.level, n.type) for n in notes] == [
        (NoteLevel.WARNING, "LONG_LINE"),
        (NoteLevel.ERROR, "CODE_INDENT"),
        (NoteLevel.WARNING, "COMMIT_MESSAGE"),
    ]
    assert notes[0].message == "line length of 92 exceeds 80 columns"
    assert (notes[0].file, notes[0].line) == ("lib/ukalloc/alloc.c", 12)
    assert notes[1].excerpt == ["+        return 0;"]
    assert notes[2].file == ""


def test_parse_clean_output():
    assert parse_checkpatch_output("total: 0 errors, 0 warnings, 10 lines checked\n") == []


def test_parse_malformed_note():
    with pytest.raises(CheckpatchError, match="expected ':'"):
        parse_checkpatch_output("WARNING:NO_COLON_HERE\n")


def test_parse_malformed_location():
    with pytest.raises(CheckpatchError, match="malformed line information"):
        parse_checkpatch_output("WARNING:LONG_LINE: too long\n#25: FILE lib/x.c\n")


def test_extract_ignores():
    message = (
        "lib/ukalloc: Fix alignment\n"
        "\n"
        "Checkpatch-Ignore: long_line, CODE_INDENT\n"
        "Checkpatch-Ignore: LONG_LINE\n"
    )

    assert extract_ignores(message) == ["LONG_LINE", "CODE_INDENT"]


def test_run_checkpatch_passes_ignores_and_conf_dir(tmp_path):
    conf = tmp_path / ".checkpatch.conf"
    conf.write_text("--no-tree\n")
    result = MagicMock(stdout="total: 0 errors, 0 warnings, 1 lines checked\n", stderr="")

    with patch("service.checkpatch.run_command", return_value=result) as run_command:
        notes = run_checkpatch(
            tmp_path / "1.patch", script="checkpatch.pl", conf=conf, ignores=["LONG_LINE"]
        )

    assert notes == []
    args = run_command.call_args.args[0]
    assert args[0] == "checkpatch.pl"
    assert args[-2:] == ["--ignore", "LONG_LINE"]
    assert run_command.call_args.kwargs["cwd"] == tmp_path.resolve()
    assert run_command.call_args.kwargs["check"] is False
