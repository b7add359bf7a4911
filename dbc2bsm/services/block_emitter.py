"""
Block emitter: turns reconciled blocks into <BB> descriptors.

beSTORM treats a <BB> as a 16 bit element, so anything wider is written as a
16 bit low part followed by the remaining high part. The split is two-way
only; blocks wider than 32 bits keep the excess in the high part.
"""
from typing import Iterable, List

from dbc2bsm.constants import BLOCK_SIZE_BITS, LSB_SUFFIX, MSB_SUFFIX
from dbc2bsm.models.layout import Block, BlockDescriptor, FrameLayout


def emit_block(block: Block) -> List[BlockDescriptor]:
    """Return one descriptor, or an LSB/MSB pair for blocks over 16 bits."""
    if block.bit_length > BLOCK_SIZE_BITS:
        return [
            BlockDescriptor(name=f"{block.name}{LSB_SUFFIX}", size=BLOCK_SIZE_BITS),
            BlockDescriptor(name=f"{block.name}{MSB_SUFFIX}", size=block.bit_length - BLOCK_SIZE_BITS),
        ]
    return [BlockDescriptor(name=block.name, size=block.bit_length)]


def emit_blocks(blocks: Iterable[Block]) -> List[BlockDescriptor]:
    descriptors: List[BlockDescriptor] = []
    for block in blocks:
        descriptors.extend(emit_block(block))
    return descriptors


def emit_layout(layout: FrameLayout) -> List[BlockDescriptor]:
    """Descriptors for every block of a layout, in block order."""
    return emit_blocks(layout.blocks)
