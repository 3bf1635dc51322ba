import pytest

from errors import ConfigurationError, InvariantViolation
from memory_manager import Frame
from policies import ClockPolicy, FIFOPolicy, LRUPolicy, make_policy


def make_frames(n):
    frames = [Frame(i) for i in range(n)]
    for frame in frames:
        frame.occupant = 100 + frame.index
    return frames


class StickyFrame(Frame):
    @property
    def referenced(self):
        return True

    @referenced.setter
    def referenced(self, value):
        pass


def test_fifo_rotates():
    policy = FIFOPolicy(3)
    frames = make_frames(3)
    assert [policy.select_victim(frames) for _ in range(4)] == [0, 1, 2, 0]


def test_fifo_ignores_accesses():
    policy = FIFOPolicy(2)
    frames = make_frames(2)
    policy.on_access(frames[0], 10)
    assert policy.select_victim(frames) == 0
    assert frames[0].last_used_tick == 0


def test_lru_picks_oldest():
    policy = LRUPolicy(3)
    frames = make_frames(3)
    for frame, tick in zip(frames, [5, 2, 7]):
        policy.on_access(frame, tick)
    assert policy.select_victim(frames) == 1


def test_lru_tie_goes_to_lowest_index():
    policy = LRUPolicy(3)
    frames = make_frames(3)
    for frame, tick in zip(frames, [5, 2, 2]):
        frame.last_used_tick = tick
    assert policy.select_victim(frames) == 1


def test_clock_skips_referenced_frames():
    policy = ClockPolicy(3)
    frames = make_frames(3)
    frames[0].referenced = True
    frames[2].referenced = True

    assert policy.select_victim(frames) == 1
    assert frames[0].referenced is False
    assert frames[2].referenced is True
    assert policy.hand == 2


def test_clock_all_referenced_takes_one_sweep():
    policy = ClockPolicy(3)
    frames = make_frames(3)
    for frame in frames:
        policy.on_access(frame, 1)

    assert policy.select_victim(frames) == 0
    assert [f.referenced for f in frames] == [False, False, False]
    assert policy.hand == 1


def test_clock_scan_is_bounded():
    policy = ClockPolicy(2)
    frames = [StickyFrame(0), StickyFrame(1)]
    with pytest.raises(InvariantViolation):
        policy.select_victim(frames)


def test_make_policy():
    assert isinstance(make_policy('fifo', 2), FIFOPolicy)
    assert isinstance(make_policy('LRU', 2), LRUPolicy)
    assert isinstance(make_policy('Clock', 2), ClockPolicy)
    with pytest.raises(ConfigurationError):
        make_policy('OPT', 2)
