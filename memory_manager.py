import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from address import Operation
from errors import ConfigurationError, InvariantViolation

logger = logging.getLogger(__name__)

TLB_LAT = 1.0
MEM_LAT = 100.0
DISK_LAT = 10000000.0


class WritePolicy(Enum):
    WRITE_THROUGH = 'Write-Through'
    WRITE_BACK = 'Write-Back'


class Frame:
    def __init__(self, index):
        self.index = index
        self.occupant = None  # VPN held by this frame, None if free
        self.dirty = False
        self.last_used_tick = 0
        self.referenced = False

    def is_free(self):
        return self.occupant is None

    def __repr__(self):
        return (f"Frame(index={self.index}, occupant={self.occupant}, dirty={self.dirty}, "
                f"last_used_tick={self.last_used_tick}, referenced={self.referenced})")


@dataclass(frozen=True)
class ResolveResult:
    hit: bool
    frame_index: int
    evicted_vpn: Optional[int] = None
    wrote_back: bool = False


class FrameCache:
    """
    Fixed set of physical frames. Placement fills free frames first and only
    then asks the eviction policy for a victim. Evictions are reported back to
    the caller through ResolveResult so it can drop the stale TLB mapping.
    """

    def __init__(self, num_frames, policy, write_policy=WritePolicy.WRITE_THROUGH):
        if num_frames <= 0:
            raise ConfigurationError("Number of frames must be > 0")
        self.num_frames = num_frames
        self.policy = policy
        self.write_policy = write_policy
        self.frames = [Frame(i) for i in range(num_frames)]

    def find_free_frame(self):
        for frame in self.frames:
            if frame.is_free():
                return frame.index
        return None

    def lookup(self, vpn):
        for frame in self.frames:
            if frame.occupant == vpn:
                return frame.index
        return None

    def touch(self, frame_index, tick, operation):
        frame = self.frames[frame_index]
        self.policy.on_access(frame, tick)
        # Write-through commits every write at once, so nothing is ever dirty
        if operation is Operation.WRITE and self.write_policy is WritePolicy.WRITE_BACK:
            frame.dirty = True

    def resolve(self, vpn, tick, operation):
        frame_index = self.lookup(vpn)
        if frame_index is not None:
            self.touch(frame_index, tick, operation)
            return ResolveResult(hit=True, frame_index=frame_index)

        frame_index = self.find_free_frame()
        if frame_index is None:
            frame_index = self.policy.select_victim(self.frames)

        frame = self.frames[frame_index]
        evicted_vpn = frame.occupant
        wrote_back = False
        if evicted_vpn is not None:
            if self.write_policy is WritePolicy.WRITE_BACK and frame.dirty:
                wrote_back = True
            logger.debug("evicting VPN %d from frame %d (dirty=%s)",
                         evicted_vpn, frame_index, frame.dirty)

        frame.occupant = vpn
        frame.dirty = False
        frame.referenced = False
        self.touch(frame_index, tick, operation)
        self.check_residency()
        return ResolveResult(hit=False, frame_index=frame_index,
                             evicted_vpn=evicted_vpn, wrote_back=wrote_back)

    def resident_pages(self):
        return [frame.occupant for frame in self.frames if not frame.is_free()]

    def check_residency(self):
        resident = self.resident_pages()
        if len(set(resident)) != len(resident):
            raise InvariantViolation(f"page resident in more than one frame: {resident}")

    def snapshot(self):
        return tuple(frame.occupant for frame in self.frames)


@dataclass(frozen=True)
class StatsReport:
    reads: int
    writes: int
    page_faults: int
    tlb_hits: int
    tlb_misses: int
    write_backs: int
    fault_rate: Optional[float] = None
    hit_rate: Optional[float] = None
    tlb_hit_rate: Optional[float] = None
    amat: Optional[float] = None

    @property
    def total_accesses(self):
        return self.reads + self.writes


class Statistics:
    def __init__(self):
        self.reads = 0
        self.writes = 0
        self.page_faults = 0
        self.tlb_hits = 0
        self.tlb_misses = 0
        self.write_backs = 0

    @property
    def total_accesses(self):
        return self.reads + self.writes

    def record_access(self, operation):
        if operation is Operation.READ:
            self.reads += 1
        else:
            self.writes += 1

    def record_tlb(self, hit):
        if hit:
            self.tlb_hits += 1
        else:
            self.tlb_misses += 1

    def record_page_fault(self):
        self.page_faults += 1

    def record_write_back(self):
        self.write_backs += 1

    def report(self, tlb_enabled):
        fault_rate = hit_rate = tlb_hit_rate = amat = None
        total = self.total_accesses
        if total > 0:
            fault_rate = self.page_faults / total
            hit_rate = 1.0 - fault_rate

        tlb_total = self.tlb_hits + self.tlb_misses
        if tlb_enabled and tlb_total > 0:
            tlb_hit_rate = self.tlb_hits / tlb_total
            amat = (tlb_hit_rate * TLB_LAT
                    + (1.0 - tlb_hit_rate) * MEM_LAT
                    + (fault_rate or 0.0) * DISK_LAT)

        return StatsReport(
            reads=self.reads,
            writes=self.writes,
            page_faults=self.page_faults,
            tlb_hits=self.tlb_hits,
            tlb_misses=self.tlb_misses,
            write_backs=self.write_backs,
            fault_rate=fault_rate,
            hit_rate=hit_rate,
            tlb_hit_rate=tlb_hit_rate,
            amat=amat,
        )

