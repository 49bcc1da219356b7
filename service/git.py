"""
git / gh 명령 실행

외부 프로세스로 git과 gh를 실행합니다. 실패하면 stderr 끝부분을 담아 GitError를 발생시킵니다.
"""

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 600


class GitError(RuntimeError):
    """git 또는 gh 명령이 실패한 경우"""


def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    stdin: str | None = None,
    env: dict[str, str] | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """
    명령을 실행하고 결과를 반환하는 함수

    Args:
        cmd: 실행할 명령과 인자
        cwd: 작업 디렉토리
        stdin: 표준 입력으로 보낼 문자열
        env: 환경변수 (None이면 현재 환경)
        check: 종료 코드가 0이 아니면 GitError를 발생시킬지 여부

    Returns:
        subprocess.CompletedProcess: 실행 결과 (stdout, stderr는 문자열)

    Raises:
        GitError: 명령을 실행할 수 없거나, check=True인데 실패한 경우
    """
    logger.debug("실행: %s", " ".join(cmd))
    try:
        res = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            input=stdin,
            env=env,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise GitError(f"명령을 실행할 수 없습니다: {cmd[0]}: {e}") from e

    if check and res.returncode != 0:
        raise GitError(
            f"{' '.join(cmd[:2])} 실패 (종료 코드 {res.returncode}):\n{res.stderr[-400:]}"
        )
    return res


def run_git(*args: str, cwd: str | Path | None = None, stdin: str | None = None) -> str:
    """git 명령을 실행하고 stdout을 반환"""
    return run_command(["git", *args], cwd=cwd, stdin=stdin).stdout


def run_gh(*args: str, cwd: str | Path | None = None, token: str = "") -> str:
    """
    gh 명령을 실행하고 stdout을 반환

    Args:
        *args: gh 인자 (예: "issue", "close", "12")
        cwd: 작업 디렉토리 (리포지토리를 추론할 위치)
        token: GH_TOKEN으로 전달할 토큰 (비어 있으면 현재 환경 사용)
    """
    env = None
    if token:
        env = {**os.environ, "GH_TOKEN": token}
    return run_command(["gh", *args], cwd=cwd, env=env).stdout
