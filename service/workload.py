"""
담당 PR 수(작업량) 추적기

사용자별로 현재 맡고 있는 열린 PR 수를 세고, 후보 중 가장 한가한 사용자를 고릅니다.
한 번 실행되는 동안만 유지되며, 선택된 사용자의 작업량은 즉시 1 증가합니다.
"""

import logging

logger = logging.getLogger(__name__)


class Workload:
    """사용자명 -> 담당 중인 열린 PR 수"""

    def __init__(self, counts: dict[str, int] | None = None):
        self.counts: dict[str, int] = dict(counts or {})

    def seed(self, handles: list[str]) -> None:
        """기존 값을 유지한 채 처음 보는 사용자를 0으로 등록"""
        for handle in handles:
            self.counts.setdefault(handle, 0)

    def add(self, handle: str) -> None:
        """이미 배정된 PR 하나를 작업량에 반영"""
        self.counts[handle] = self.counts.get(handle, 0) + 1

    def get(self, handle: str) -> int:
        return self.counts.get(handle, 0)

    def pop_least_stressed(self, candidates: list[str]) -> str:
        """
        후보 중 작업량이 가장 적은 사용자를 골라 작업량을 1 올리는 함수

        작업량이 같으면 사용자명 오름차순으로 고릅니다.

        Args:
            candidates: 후보 사용자명 목록

        Returns:
            str: 선택된 사용자명

        Raises:
            ValueError: 후보가 없는 경우
        """
        if not candidates:
            raise ValueError("작업량을 비교할 후보가 없습니다.")

        self.seed(candidates)
        least = min(candidates, key=lambda handle: (self.counts[handle], handle))
        self.counts[least] += 1

        logger.debug("가장 한가한 사용자: %s (작업량 %d)", least, self.counts[least])
        return least

    def __repr__(self) -> str:
        return f"Workload({self.counts!r})"
