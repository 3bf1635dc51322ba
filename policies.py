import logging

from errors import ConfigurationError, InvariantViolation

logger = logging.getLogger(__name__)

POLICY_NAMES = ('FIFO', 'LRU', 'CLOCK')


class EvictionPolicy:
    """
    Picks which frame to reclaim once every frame is occupied.

    Each policy also maintains whatever per-frame metadata it relies on
    through on_access(), which the frame cache calls on every hit and on
    every page placed by a fault.
    """
    name = None

    def __init__(self, capacity):
        self.capacity = capacity

    def on_access(self, frame, tick):
        pass

    def select_victim(self, frames):
        raise NotImplementedError


class FIFOPolicy(EvictionPolicy):
    name = 'FIFO'

    def __init__(self, capacity):
        super().__init__(capacity)
        self.next_victim = 0

    def select_victim(self, frames):
        victim = self.next_victim
        self.next_victim = (self.next_victim + 1) % self.capacity
        return victim


class LRUPolicy(EvictionPolicy):
    name = 'LRU'

    def on_access(self, frame, tick):
        frame.last_used_tick = tick

    def select_victim(self, frames):
        victim = 0
        for frame in frames[1:]:
            # Strict less-than keeps the lowest index on ties
            if frame.last_used_tick < frames[victim].last_used_tick:
                victim = frame.index
        return victim


class ClockPolicy(EvictionPolicy):
    name = 'CLOCK'

    def __init__(self, capacity):
        super().__init__(capacity)
        self.hand = 0

    def on_access(self, frame, tick):
        frame.referenced = True

    def select_victim(self, frames):
        # Every referenced bit is cleared at most once, so a full sweep plus
        # one more visit always finds a victim.
        for _ in range(2 * self.capacity):
            frame = frames[self.hand]
            self.hand = (self.hand + 1) % self.capacity
            if not frame.referenced:
                return frame.index
            frame.referenced = False
        raise InvariantViolation(
            f"CLOCK scan visited {2 * self.capacity} frames without finding a victim")


_POLICIES = {cls.name: cls for cls in (FIFOPolicy, LRUPolicy, ClockPolicy)}


def make_policy(name, capacity):
    try:
        policy_cls = _POLICIES[name.upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown algorithm: {name}") from None
    logger.debug("using %s eviction over %d frames", policy_cls.name, capacity)
    return policy_cls(capacity)
