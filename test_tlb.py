import pytest

from errors import ConfigurationError
from tlb import TLB


def test_rejects_empty_tlb():
    with pytest.raises(ConfigurationError):
        TLB(0)


def test_lookup_miss_then_hit():
    tlb = TLB(2)
    assert tlb.lookup(3, 1) is None
    tlb.insert(3, 1, 1)
    assert tlb.lookup(3, 5) == 1
    assert tlb.entries[0].last_used_tick == 5


def test_insert_existing_updates_in_place():
    tlb = TLB(2)
    tlb.insert(3, 0, 1)
    tlb.insert(3, 1, 2)
    assert len(tlb.valid_entries()) == 1
    assert tlb.lookup(3, 3) == 1


def test_insert_reuses_invalidated_slot():
    tlb = TLB(2)
    tlb.insert(1, 0, 1)
    tlb.insert(2, 1, 2)
    tlb.invalidate(1)
    assert tlb.lookup(1, 3) is None

    tlb.insert(3, 0, 4)
    assert tlb.entries[0].vpn == 3
    assert tlb.lookup(2, 5) == 1


def test_evicts_least_recently_used():
    tlb = TLB(2)
    tlb.insert(1, 0, 1)
    tlb.insert(2, 1, 2)
    tlb.lookup(1, 3)
    tlb.insert(3, 2, 4)
    assert sorted(e.vpn for e in tlb.valid_entries()) == [1, 3]


def test_eviction_tie_goes_to_lowest_index():
    tlb = TLB(3)
    tlb.insert(1, 0, 7)
    tlb.insert(2, 1, 7)
    tlb.insert(3, 2, 7)
    tlb.insert(4, 0, 8)
    assert [e.vpn for e in tlb.entries] == [4, 2, 3]


def test_invalidate_unknown_vpn_is_noop():
    tlb = TLB(1)
    tlb.insert(1, 0, 1)
    tlb.invalidate(9)
    assert tlb.lookup(1, 2) == 0
