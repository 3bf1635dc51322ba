from dataclasses import dataclass
from enum import Enum

PAGE_SIZE = 4096
MAX_ADDRESS = 0xFFFFFFFF


class Operation(Enum):
    READ = 'R'
    WRITE = 'W'

    @classmethod
    def from_marker(cls, marker):
        # Anything other than 'R' or 'W' is not a memory access
        for op in cls:
            if op.value == marker:
                return op
        return None


@dataclass(frozen=True)
class TraceRecord:
    operation: Operation
    address: int


def translate(address):
    return address // PAGE_SIZE


def split_address(address):
    return translate(address), address % PAGE_SIZE
