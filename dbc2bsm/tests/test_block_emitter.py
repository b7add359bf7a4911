import pytest

from dbc2bsm.models import BlockDescriptor, FrameLayout, GapBlock, NamedBlock
from dbc2bsm.services.block_emitter import emit_block, emit_layout


@pytest.mark.parametrize('length', [1, 8, 12, 16])
def test_narrow_block_yields_one_descriptor(length):
    assert emit_block(NamedBlock('sig', length)) == [BlockDescriptor('sig', length)]


@pytest.mark.parametrize('length', [17, 20, 24, 32])
def test_wide_block_splits_into_lsb_and_msb(length):
    low, high = emit_block(NamedBlock('X', length))
    assert low == BlockDescriptor('X (LSB)', 16)
    assert high == BlockDescriptor('X (MSB)', length - 16)
    assert low.size + high.size == length


def test_gap_block_uses_same_split_rule():
    assert emit_block(GapBlock(8)) == [BlockDescriptor('UNKNOWN', 8)]
    assert emit_block(GapBlock(20)) == [
        BlockDescriptor('UNKNOWN (LSB)', 16),
        BlockDescriptor('UNKNOWN (MSB)', 4),
    ]


def test_split_is_two_way_only():
    descriptors = emit_block(NamedBlock('Huge', 40))
    assert [(d.name, d.size) for d in descriptors] == [('Huge (LSB)', 16), ('Huge (MSB)', 24)]


def test_descriptors_carry_zero_bit_offset():
    for d in emit_block(NamedBlock('X', 30, start_bit=12)):
        assert d.bits == 0


def test_emit_layout_keeps_block_order():
    layout = FrameLayout(
        message_name='M', frame_id=1, padding_size=32, raw_size=32,
        blocks=(GapBlock(4), NamedBlock('A', 20, 4), NamedBlock('B', 8, 24)),
    )
    assert [(d.name, d.size) for d in emit_layout(layout)] == [
        ('UNKNOWN', 4), ('A (LSB)', 16), ('A (MSB)', 4), ('B', 8),
    ]
