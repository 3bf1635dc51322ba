import logging

from errors import ConfigurationError

logger = logging.getLogger(__name__)


class TLBEntry:
    def __init__(self):
        self.valid = False
        self.vpn = 0
        self.frame_index = -1
        self.last_used_tick = 0

    def fill(self, vpn, frame_index, tick):
        self.valid = True
        self.vpn = vpn
        self.frame_index = frame_index
        self.last_used_tick = tick

    def __repr__(self):
        return (f"TLBEntry(valid={self.valid}, vpn={self.vpn}, "
                f"frame_index={self.frame_index}, last_used_tick={self.last_used_tick})")


class TLB:
    """
    Fully associative VPN -> frame cache with its own strict LRU replacement,
    independent of the frame cache's eviction policy.
    """

    def __init__(self, size):
        if size <= 0:
            raise ConfigurationError("TLB size must be > 0 when a TLB is used")
        self.size = size
        self.entries = [TLBEntry() for _ in range(size)]

    def _find(self, vpn):
        for entry in self.entries:
            if entry.valid and entry.vpn == vpn:
                return entry
        return None

    def lookup(self, vpn, tick):
        entry = self._find(vpn)
        if entry is None:
            return None
        entry.last_used_tick = tick
        return entry.frame_index

    def insert(self, vpn, frame_index, tick):
        entry = self._find(vpn)
        if entry is not None:
            entry.frame_index = frame_index
            entry.last_used_tick = tick
            return

        for entry in self.entries:
            if not entry.valid:
                entry.fill(vpn, frame_index, tick)
                return

        victim = self.entries[0]
        for entry in self.entries[1:]:
            if entry.last_used_tick < victim.last_used_tick:
                victim = entry
        logger.debug("TLB evict: vpn=%d (frame %d)", victim.vpn, victim.frame_index)
        victim.fill(vpn, frame_index, tick)

    def invalidate(self, vpn):
        for entry in self.entries:
            if entry.valid and entry.vpn == vpn:
                entry.valid = False
                logger.debug("TLB invalidate: vpn=%d", vpn)

    def valid_entries(self):
        return [entry for entry in self.entries if entry.valid]
