"""
작업량 추적기 테스트
"""

import pytest

from service.workload import Workload


def test_pop_least_stressed_picks_lowest_workload():
    workload = Workload({"alice": 2, "bob": 0})

    assert workload.pop_least_stressed(["alice", "bob"]) == "bob"
    assert workload.get("bob") == 1


def test_pop_least_stressed_breaks_ties_by_handle():
    workload = Workload({"carol": 1, "bob": 1, "dave": 3})

    assert workload.pop_least_stressed(["carol", "dave", "bob"]) == "bob"


def test_pop_least_stressed_spreads_load():
    workload = Workload()

    picked = [workload.pop_least_stressed(["alice", "bob"]) for _ in range(4)]

    assert picked == ["alice", "bob", "alice", "bob"]
    assert workload.counts == {"alice": 2, "bob": 2}


def test_pop_least_stressed_registers_unknown_candidates():
    workload = Workload({"alice": 1})

    assert workload.pop_least_stressed(["zed"]) == "zed"
    assert workload.get("zed") == 1


def test_pop_least_stressed_without_candidates():
    with pytest.raises(ValueError):
        Workload().pop_least_stressed([])


def test_seed_keeps_existing_counts():
    workload = Workload({"alice": 3})
    workload.seed(["alice", "bob"])
    workload.add("bob")

    assert workload.counts == {"alice": 3, "bob": 1}
