"""
Service layer for the DBC to beSTORM converter.

Services:
- DbcService: DBC file loading via cantools
- layout_service: frame size and block reconciliation
- block_emitter: <BB> descriptor generation
- DocumentService: beSTORM document assembly and output
"""

from dbc2bsm.services.dbc_service import DbcService
from dbc2bsm.services.document_service import DocumentService
from dbc2bsm.services.layout_service import reconcile, layout_to_dict
from dbc2bsm.services.block_emitter import emit_block, emit_layout

__all__ = ['DbcService', 'DocumentService', 'reconcile', 'layout_to_dict', 'emit_block', 'emit_layout']
