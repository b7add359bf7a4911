"""
Data models for the DBC to beSTORM converter.

Models:
- SignalDef, MessageDef: read-only view of the DBC message set
- NamedBlock, GapBlock: tagged blocks of a reconciled frame layout
- BlockDescriptor: one emitted <BB> element
- FrameLayout: reconciled layout of one message
"""

from dbc2bsm.models.dbc_model import SignalDef, MessageDef, messages_from_cantools
from dbc2bsm.models.layout import NamedBlock, GapBlock, Block, BlockDescriptor, FrameLayout

__all__ = [
    'SignalDef', 'MessageDef', 'messages_from_cantools',
    'NamedBlock', 'GapBlock', 'Block', 'BlockDescriptor', 'FrameLayout',
]
