import argparse
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from address import MAX_ADDRESS, Operation, TraceRecord, split_address
from errors import ConfigurationError, TraceFormatError
from memory_manager import FrameCache, Statistics, StatsReport, WritePolicy
from policies import POLICY_NAMES, make_policy
from tlb import TLB

logger = logging.getLogger(__name__)

DEFAULT_NUM_FRAMES = 3


@dataclass
class SimulationConfig:
    policy: str = 'FIFO'
    num_frames: int = DEFAULT_NUM_FRAMES
    tlb_size: int = 0
    write_policy: WritePolicy = WritePolicy.WRITE_THROUGH
    trace_path: Optional[str] = None

    def __post_init__(self):
        self.policy = str(self.policy).upper()
        if self.policy not in POLICY_NAMES:
            raise ConfigurationError(f"Unknown algorithm: {self.policy}")
        if self.num_frames <= 0:
            raise ConfigurationError("Number of frames must be > 0")
        if self.tlb_size < 0:
            # A negative size disables the TLB instead of failing
            logger.warning("TLB size %d is negative, disabling the TLB", self.tlb_size)
            self.tlb_size = 0
        if not isinstance(self.write_policy, WritePolicy):
            raise ConfigurationError(f"Unknown write policy: {self.write_policy}")

    @property
    def tlb_enabled(self):
        return self.tlb_size > 0


class Outcome(Enum):
    TLB_HIT = 'TLB HIT'
    FRAME_HIT = 'HIT'
    PAGE_FAULT = 'PAGE FAULT'


@dataclass(frozen=True)
class AccessOutcome:
    operation: Operation
    address: int
    vpn: int
    kind: Outcome
    frame_index: int
    tlb_hit: Optional[bool]  # None when there is no TLB
    frames: Tuple[Optional[int], ...]


@dataclass(frozen=True)
class SimulationReport:
    config: SimulationConfig
    stats: StatsReport


class VirtualMemorySimulator:

    def __init__(self, config=None):
        self.config = config if config is not None else SimulationConfig()
        policy = make_policy(self.config.policy, self.config.num_frames)
        self.frame_cache = FrameCache(self.config.num_frames, policy, self.config.write_policy)
        self.tlb = TLB(self.config.tlb_size) if self.config.tlb_enabled else None
        self.stats = Statistics()
        self.current_time = 0

    def process(self, marker, address):
        operation = Operation.from_marker(marker)
        if operation is None:
            logger.debug("skipping record with unknown operation %r", marker)
            return None
        return self.access(TraceRecord(operation, address))

    def access(self, record):
        self.current_time += 1
        tick = self.current_time
        operation = record.operation
        vpn, _offset = split_address(record.address)
        self.stats.record_access(operation)

        tlb_hit = None
        if self.tlb is not None:
            frame_index = self.tlb.lookup(vpn, tick)
            tlb_hit = frame_index is not None
            self.stats.record_tlb(tlb_hit)
            if tlb_hit:
                self.frame_cache.touch(frame_index, tick, operation)
                return self._outcome(record, vpn, Outcome.TLB_HIT, frame_index, tlb_hit)

        result = self.frame_cache.resolve(vpn, tick, operation)
        if result.hit:
            kind = Outcome.FRAME_HIT
        else:
            kind = Outcome.PAGE_FAULT
            self.stats.record_page_fault()
            if result.wrote_back:
                self.stats.record_write_back()
            if result.evicted_vpn is not None and self.tlb is not None:
                self.tlb.invalidate(result.evicted_vpn)

        if self.tlb is not None:
            self.tlb.insert(vpn, result.frame_index, tick)
        return self._outcome(record, vpn, kind, result.frame_index, tlb_hit)

    def _outcome(self, record, vpn, kind, frame_index, tlb_hit):
        return AccessOutcome(
            operation=record.operation,
            address=record.address,
            vpn=vpn,
            kind=kind,
            frame_index=frame_index,
            tlb_hit=tlb_hit,
            frames=self.frame_cache.snapshot(),
        )

    def report(self):
        return SimulationReport(config=self.config,
                                stats=self.stats.report(self.config.tlb_enabled))

    def run(self, records, on_outcome=None):
        for marker, address in records:
            outcome = self.process(marker, address)
            if outcome is not None and on_outcome is not None:
                on_outcome(outcome)
        return self.report()


def read_trace(filename):
    with open(filename, 'r') as f:
        for line_number, line in enumerate(f, 1):
            parts = line.split()
            if len(parts) < 2:
                continue
            marker, token = parts[0], parts[1]
            if Operation.from_marker(marker) is None:
                # Comments, headers and unknown operations are not accesses
                continue
            try:
                address = int(token, 16)
            except ValueError:
                raise TraceFormatError(line_number, line.rstrip('\n'), "bad hex address") from None
            if address < 0 or address > MAX_ADDRESS:
                raise TraceFormatError(line_number, line.rstrip('\n'), "address is not 32-bit")
            yield marker, address


def format_frames(frames):
    slots = ''.join(' -' if vpn is None else f" {vpn}" for vpn in frames)
    return f"Frames: [{slots} ]"


def format_outcome(outcome):
    lines = []
    if outcome.tlb_hit is False:
        lines.append(" -> TLB MISS")
    result = outcome.kind.value
    if outcome.kind is Outcome.TLB_HIT:
        result += f" (frame {outcome.frame_index})"
    lines.append(f"Operation: {outcome.operation.value} | Address: 0x{outcome.address:x} "
                 f"| VPN: {outcome.vpn} -> {result}")
    lines.append(format_frames(outcome.frames))
    return '\n'.join(lines)


def format_report(report):
    config, stats = report.config, report.stats
    lines = [
        "--- Stats ---",
        f"Algorithm: {config.policy}",
        f"Write policy: {config.write_policy.value}",
        f"Frames: {config.num_frames}",
        f"Reads: {stats.reads}",
        f"Writes: {stats.writes}",
        f"Total accesses: {stats.total_accesses}",
        f"Total page faults: {stats.page_faults}",
    ]
    if stats.fault_rate is not None:
        lines.append(f"Memory hit rate: {stats.hit_rate * 100.0:.2f}%")
        lines.append(f"Page fault rate: {stats.fault_rate * 100.0:.2f}%")
    if config.tlb_enabled:
        lines.append(f"TLB entries: {config.tlb_size}")
        lines.append(f"TLB hits: {stats.tlb_hits}")
        lines.append(f"TLB misses: {stats.tlb_misses}")
        if stats.tlb_hit_rate is not None:
            lines.append(f"TLB hit rate: {stats.tlb_hit_rate * 100.0:.2f}%")
            lines.append(f"Approx. AMAT: {stats.amat:.2f} cycles")
    lines.append(f"Write-backs (dirty evictions): {stats.write_backs}")
    return '\n'.join(lines)


def build_parser():
    parser = argparse.ArgumentParser(description='Paging and TLB trace simulator.')
    parser.add_argument('-a', '--algorithm', required=True, choices=['fifo', 'lru', 'clock'],
                        help='page replacement algorithm')
    parser.add_argument('-f', '--frames', type=int, default=DEFAULT_NUM_FRAMES,
                        help='number of physical frames')
    parser.add_argument('-t', '--tlb', type=int, default=0,
                        help='number of TLB entries (0 disables the TLB)')
    write_group = parser.add_mutually_exclusive_group()
    write_group.add_argument('-wt', dest='write_policy', action='store_const',
                             const=WritePolicy.WRITE_THROUGH, help='write-through (default)')
    write_group.add_argument('-wb', dest='write_policy', action='store_const',
                             const=WritePolicy.WRITE_BACK, help='write-back')
    parser.add_argument('-q', '--quiet', action='store_true', help='only print the final stats')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    parser.add_argument('tracefile', help='trace file of "<R|W> <hex address>" lines')
    parser.set_defaults(write_policy=WritePolicy.WRITE_THROUGH)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        config = SimulationConfig(policy=args.algorithm, num_frames=args.frames,
                                  tlb_size=args.tlb, write_policy=args.write_policy,
                                  trace_path=args.tracefile)
    except ConfigurationError as e:
        parser.error(str(e))

    simulator = VirtualMemorySimulator(config)
    on_outcome = None if args.quiet else lambda outcome: print(format_outcome(outcome))

    print(f"Reading trace file: {config.trace_path}")
    try:
        report = simulator.run(read_trace(config.trace_path), on_outcome)
    except OSError as e:
        print(f"Error opening trace file: {e}", file=sys.stderr)
        return 1
    except TraceFormatError as e:
        print(f"Error reading trace file: {e}", file=sys.stderr)
        return 1

    print()
    print(format_report(report))
    print("Simulation finished.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
