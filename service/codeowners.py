"""
CODEOWNERS 파서

CODEOWNERS 파일 형식: <pattern> @owner1 @org/team ...
파일 하나에 여러 규칙이 일치하면 마지막 규칙이 우선합니다 (GitHub 규칙과 동일).
"""

import logging

from service.label import glob_match

logger = logging.getLogger(__name__)

# GitHub가 CODEOWNERS를 찾는 위치 (우선순위 순)
CODEOWNERS_PATHS = [".github/CODEOWNERS", "CODEOWNERS", "docs/CODEOWNERS"]


def _to_globs(pattern: str) -> list[str]:
    """
    CODEOWNERS 패턴을 glob 패턴 목록으로 변환

    부정 패턴("!")과 이스케이프된 공백("\\ ")은 지원하지 않습니다.
    """
    anchored = pattern.startswith("/")
    pattern = pattern.lstrip("/")

    if pattern.endswith("/"):
        return [("" if anchored else "**/") + pattern + "**"]

    # 중간에 "/"가 없으면 모든 깊이에서 일치
    if not anchored and "/" not in pattern:
        pattern = "**/" + pattern

    # 디렉토리를 가리키는 패턴이면 그 아래 모든 파일과 일치
    return [pattern, pattern + "/**"]


class CodeOwners:
    """파싱된 CODEOWNERS 규칙 목록"""

    def __init__(self, rules: list[tuple[str, list[str]]]):
        self.rules = rules

    @classmethod
    def parse(cls, content: str) -> "CodeOwners":
        """
        CODEOWNERS 파일 내용을 파싱하는 함수

        Args:
            content: CODEOWNERS 파일 내용

        Returns:
            CodeOwners: 파싱된 규칙
        """
        rules = []
        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            tokens = line.split()
            owners = []
            for token in tokens[1:]:
                # 줄 끝 주석
                if token.startswith("#"):
                    break
                owners.append(token)
            rules.append((tokens[0], owners))

        logger.debug("CODEOWNERS 규칙 %d개를 읽었습니다", len(rules))
        return cls(rules)

    def owners(self, path: str) -> list[str]:
        """
        파일 경로의 소유자 목록을 반환하는 함수

        Args:
            path: 리포지토리 루트 기준 상대 경로

        Returns:
            list[str]: 마지막으로 일치한 규칙의 소유자 (없으면 빈 리스트)
        """
        path = path.lstrip("/")
        for pattern, owners in reversed(self.rules):
            if any(glob_match(g, path) for g in _to_globs(pattern)):
                return owners
        return []
