"""
Frame layout model produced by the layout reconciler.

A layout is a short-lived value: it is built for one message, turned into
block descriptors and then dropped.
"""
from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from dbc2bsm.constants import DESCRIPTOR_BIT_OFFSET, UNKNOWN_BLOCK_NAME


@dataclass(frozen=True)
class NamedBlock:
    """Bit range owned by a real signal."""
    name: str
    bit_length: int
    start_bit: int = 0

    kind: ClassVar[str] = "signal"


@dataclass(frozen=True)
class GapBlock:
    """Bit range no signal claims. Always emitted as UNKNOWN."""
    bit_length: int
    start_bit: int = 0

    kind: ClassVar[str] = "gap"
    name: ClassVar[str] = UNKNOWN_BLOCK_NAME


Block = Union[NamedBlock, GapBlock]


@dataclass(frozen=True)
class BlockDescriptor:
    """One <BB> element of the output document.

    Attributes:
        name: Display name (may carry an LSB/MSB suffix)
        size: Number of bits
        bits: Bit offset field, always 0
    """
    name: str
    size: int
    bits: int = DESCRIPTOR_BIT_OFFSET


@dataclass(frozen=True)
class FrameLayout:
    """Reconciled layout of a single message.

    Attributes:
        message_name: Name of the source message
        frame_id: CAN identifier of the source message
        padding_size: Frame size rounded up to 8, 16, 24 or 32 bits
        raw_size: Signal plus gap bits before rounding
        blocks: Blocks to emit, in declaration order
    """
    message_name: str
    frame_id: int
    padding_size: int
    raw_size: int
    blocks: Tuple[Block, ...] = ()

    @property
    def gap_count(self) -> int:
        return sum(1 for b in self.blocks if isinstance(b, GapBlock))
