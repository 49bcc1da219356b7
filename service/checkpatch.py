"""
checkpatch.pl 실행 및 결과 파싱

checkpatch.pl 출력 예시:
    WARNING:LONG_LINE: line length of 92 exceeds 80 columns
    #25: FILE: lib/foo.c:12:
    +	very_long_function_call(argument_one, argument_two);

    total: 0 errors, 1 warnings, 40 lines checked
"""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from service.git import GitError, run_command

logger = logging.getLogger(__name__)

CHECKPATCH_IGNORE = "Checkpatch-Ignore:"

CHECKPATCH_ARGS = [
    "--color=never",
    "--show-types",
    "--no-tree",
    "--strict",
    "--max-line-length=80",
]


class CheckpatchError(RuntimeError):
    """checkpatch.pl을 실행할 수 없거나 출력 형식이 잘못된 경우"""


class NoteLevel(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class Note(BaseModel):
    """checkpatch 결과 항목 하나"""

    level: NoteLevel
    type: str
    message: str
    file: str = ""
    line: int = 0
    excerpt: list[str] = []


def _parse_location(line: str) -> tuple[str, int]:
    """'#25: FILE: lib/foo.c:12:' 형식에서 파일과 줄 번호를 꺼냄"""
    split = line.split(": ")
    if len(split) != 3:
        raise CheckpatchError(
            "malformed line information: expected format "
            f"'#<DIGITS>: FILE: <FILE>:<LINE>:' but got '{line}'"
        )

    file_line = split[2].split(":")
    if len(file_line) != 3:
        raise CheckpatchError(
            f"malformed line information: expected '<FILE>:<LINE>:' but got '{line}'"
        )

    try:
        return file_line[0], int(file_line[1])
    except ValueError as e:
        raise CheckpatchError(
            f"could not convert line number '{file_line[1]}' on line '{line}'"
        ) from e


def parse_checkpatch_output(text: str) -> list[Note]:
    """
    checkpatch.pl 출력을 Note 목록으로 파싱하는 함수

    Args:
        text: checkpatch.pl 표준 출력

    Returns:
        list[Note]: 경고/오류 목록 (출력 순서)

    Raises:
        CheckpatchError: WARNING/ERROR 줄이나 FILE 줄의 형식이 잘못된 경우
    """
    notes: list[Note] = []
    note: Note | None = None

    for line in text.rstrip("\n").split("\n"):
        level = None
        if line.startswith("WARNING:"):
            level = NoteLevel.WARNING
        elif line.startswith("ERROR:"):
            level = NoteLevel.ERROR

        if level is not None:
            rest = line.split(":", 1)[1]
            note_type, sep, message = rest.partition(":")
            if not sep:
                raise CheckpatchError(f"malformed checkpatch line '{line}': expected ':'")
            note = Note(level=level, type=note_type, message=message.strip())
            notes.append(note)
        elif line.startswith("total:"):
            break
        elif note is not None and not note.file and "FILE" in line:
            note.file, note.line = _parse_location(line)
        elif note is not None and line:
            note.excerpt.append(line)

    return notes


def extract_ignores(message: str) -> list[str]:
    """
    커밋 메시지의 'Checkpatch-Ignore: A, B' 줄에서 무시할 유형을 대문자로 모으는 함수
    """
    ignores = []
    for line in message.split("\n"):
        if not line.startswith(CHECKPATCH_IGNORE):
            continue
        for item in line[len(CHECKPATCH_IGNORE):].split(","):
            item = item.strip().upper()
            if item and item not in ignores:
                ignores.append(item)
    return ignores


def run_checkpatch(
    patch_file: str | Path,
    script: str | Path = "checkpatch.pl",
    conf: str | Path | None = None,
    ignores: list[str] | None = None,
) -> list[Note]:
    """
    패치 파일 하나에 checkpatch.pl을 실행하는 함수

    checkpatch.pl은 문제가 있으면 0이 아닌 종료 코드를 반환하므로 종료 코드는 무시합니다.
    conf가 주어지면 그 디렉토리에서 실행하여 .checkpatch.conf를 읽게 합니다.

    Args:
        patch_file: 메일박스 형식 패치 파일
        script: checkpatch.pl 경로
        conf: .checkpatch.conf 경로
        ignores: 무시할 유형 목록

    Returns:
        list[Note]: 결과 목록

    Raises:
        CheckpatchError: 실행할 수 없거나 출력 형식이 잘못된 경우
    """
    # PATH에서 찾는 이름이 아니면 절대 경로로 실행
    if Path(script).exists():
        script = Path(script).resolve()

    args = [str(script), *CHECKPATCH_ARGS, str(Path(patch_file).resolve())]
    if ignores:
        args += ["--ignore", ",".join(ignores)]

    cwd = Path(conf).resolve().parent if conf else None
    logger.info(" ".join(args))

    try:
        res = run_command(args, cwd=cwd, check=False)
    except GitError as e:
        raise CheckpatchError(f"could not start checkpatch.pl: {e}") from e

    if res.stderr:
        logger.debug(res.stderr)
    return parse_checkpatch_output(res.stdout)
