"""
Layout reconciliation for CAN messages.

Turns a message's signal list into a padded frame size and an ordered list of
blocks, inserting UNKNOWN gap blocks where no signal claims a bit range.

The frame size is needed before any block is written, so the signals are
walked twice: once to size the frame (every signal counts) and once to build
the blocks (multiplexor and multiplexed signals are left out). Placement
follows declaration order, not start bit order; signals declared out of bit
order produce the gaps and ordering that order implies.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dbc2bsm.constants import (
    PADDING_SIZES, MAX_PADDING_SIZE,
    OVERSIZE_POLICY_REJECT, OVERSIZE_POLICY_CLAMP, OVERSIZE_POLICIES,
)
from dbc2bsm.exceptions import MultipleMultiplexorError, OversizedFrameError, ConfigurationError
from dbc2bsm.models.dbc_model import MessageDef, SignalDef
from dbc2bsm.models.layout import Block, FrameLayout, GapBlock, NamedBlock
from dbc2bsm.services.block_emitter import emit_block

logger = logging.getLogger(__name__)


def compute_raw_size(signals: Iterable[SignalDef]) -> int:
    """Sum signal bits plus the gaps in front of them, in declaration order.

    Every signal is counted, multiplexor and multiplexed ones included.
    """
    raw_size = 0
    last_bit = 0
    for sig in signals:
        if sig.start_bit > last_bit:
            raw_size += sig.start_bit - last_bit
            last_bit = sig.start_bit
        raw_size += sig.bit_length
        last_bit = sig.end_bit
    return raw_size


def quantize_padding(raw_size: int, policy: str = OVERSIZE_POLICY_REJECT,
                     message_name: Optional[str] = None) -> int:
    """Round raw_size up to the smallest allowed PaddingSize.

    Args:
        raw_size: Bits needed by the frame
        policy: What to do above 32 bits, 'reject' or 'clamp'
        message_name: Used in error and log messages

    Returns:
        One of 8, 16, 24 or 32

    Raises:
        OversizedFrameError: raw_size exceeds 32 bits and policy is 'reject'
        ConfigurationError: policy is not a known oversize policy
    """
    if policy not in OVERSIZE_POLICIES:
        raise ConfigurationError(
            f"Unknown oversize policy: {policy}",
            setting_name='oversize_policy', setting_value=policy,
            expected=f"one of {OVERSIZE_POLICIES}",
        )
    for size in PADDING_SIZES:
        if raw_size <= size:
            return size

    if policy == OVERSIZE_POLICY_CLAMP:
        logger.warning(
            f"Message {message_name} needs {raw_size} bits, clamping PaddingSize to {MAX_PADDING_SIZE}"
        )
        return MAX_PADDING_SIZE
    raise OversizedFrameError(
        f"Message {message_name} needs {raw_size} bits, more than the {MAX_PADDING_SIZE} bit maximum",
        message_name=message_name,
        raw_size=raw_size,
    )


def build_blocks(message: MessageDef) -> Tuple[Block, ...]:
    """Build the ordered block list for a message.

    Raises:
        MultipleMultiplexorError: more than one multiplexor signal is declared
    """
    blocks: List[Block] = []
    multiplexor: Optional[SignalDef] = None
    last_bit = 0

    for sig in message.signals:
        if sig.is_multiplexor:
            if multiplexor is not None:
                raise MultipleMultiplexorError(
                    f"multiple multiplexor signals in one message: {message.name} "
                    f"({multiplexor.name}, {sig.name})",
                    message_name=message.name,
                    signal_names=(multiplexor.name, sig.name),
                )
            multiplexor = sig
            continue
        # Per-case layouts are not emitted
        if sig.is_multiplexed:
            continue

        if sig.start_bit > last_bit:
            blocks.append(GapBlock(bit_length=sig.start_bit - last_bit, start_bit=last_bit))
            last_bit = sig.start_bit
        blocks.append(NamedBlock(name=sig.name, bit_length=sig.bit_length, start_bit=sig.start_bit))
        last_bit = sig.end_bit

    return tuple(blocks)


def reconcile(message: MessageDef, policy: str = OVERSIZE_POLICY_REJECT) -> FrameLayout:
    """Compute the padded frame size and block list for one message.

    Args:
        message: Message to lay out
        policy: Oversized frame policy, see quantize_padding()

    Returns:
        FrameLayout for the message

    Raises:
        MultipleMultiplexorError: more than one multiplexor signal is declared
        OversizedFrameError: frame exceeds 32 bits under the 'reject' policy
    """
    raw_size = compute_raw_size(message.signals)
    padding_size = quantize_padding(raw_size, policy, message_name=message.name)
    blocks = build_blocks(message)
    logger.debug(
        f"Reconciled {message.name} (0x{message.frame_id:X}): raw={raw_size} "
        f"padding={padding_size} blocks={len(blocks)}"
    )
    return FrameLayout(
        message_name=message.name,
        frame_id=message.frame_id,
        padding_size=padding_size,
        raw_size=raw_size,
        blocks=blocks,
    )


def layout_to_dict(layout: FrameLayout) -> Dict[str, Any]:
    """Return a JSON-serializable view of a layout and its descriptors."""
    blocks = []
    for block in layout.blocks:
        blocks.append({
            'kind': block.kind,
            'name': block.name,
            'start_bit': block.start_bit,
            'bit_length': block.bit_length,
            'descriptors': [{'name': d.name, 'size': d.size} for d in emit_block(block)],
        })
    return {
        'name': layout.message_name,
        'frame_id': layout.frame_id,
        'padding_size': layout.padding_size,
        'raw_size': layout.raw_size,
        'blocks': blocks,
    }
