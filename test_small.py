import os

import pytest

from simulator import Outcome, SimulationConfig, VirtualMemorySimulator, read_trace

TEST_TRACE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'test.txt')


@pytest.mark.parametrize('algorithm', ['FIFO', 'LRU', 'CLOCK'])
def test_small(algorithm):
    simulator = VirtualMemorySimulator(SimulationConfig(policy=algorithm, num_frames=2))
    outcomes = []
    report = simulator.run(read_trace(TEST_TRACE), outcomes.append)

    assert [o.kind for o in outcomes] == [Outcome.PAGE_FAULT] * 4
    assert report.stats.page_faults == 4
    assert report.stats.reads == 4
    assert report.stats.fault_rate == 1.0
    assert report.stats.hit_rate == 0.0


def test_small_fifo_frames():
    simulator = VirtualMemorySimulator(SimulationConfig(policy='FIFO', num_frames=2))
    frames = []
    simulator.run(read_trace(TEST_TRACE), lambda outcome: frames.append(outcome.frames))

    # VPN 0 is evicted for VPN 2, so the final access evicts VPN 1
    assert frames == [(0, None), (0, 1), (2, 1), (2, 0)]
