"""
Document service for assembling beSTORM XML from a CAN message set.

The document is built as an ElementTree and serialized by render(), which is
the only place that deals with indentation and escaping. Every message is
reconciled before anything is written, so a structural error leaves the
output sink untouched.

Document layout:
- GeneratorOptSettings and the CAN module header (open device, set globals)
- Provenance comment and optional generation time comment
- One "CAN Send" procedure per message with its <BB> bit blocks
- Close device procedure
"""
import time
import logging
import xml.etree.ElementTree as ET
from typing import Callable, Iterable, List, Optional, TextIO

from dbc2bsm.config import BsmSettings
from dbc2bsm.constants import (
    BESTORM_VERSION, FACTORY_TYPE, MODULE_NAME, PROTOCOL_NAME, SEQUENCE_NAME,
    MESSAGES_NAME, OPEN_PROCEDURE_NAME, HANDLE_PARAMETER,
    PROVENANCE_COMMENT, TIMESTAMP_COMMENT_PREFIX, XML_DECLARATION, CAN_BAUDRATES,
)
from dbc2bsm.exceptions import SinkWriteError
from dbc2bsm.models.dbc_model import MessageDef
from dbc2bsm.models.layout import FrameLayout
from dbc2bsm.services.block_emitter import emit_layout
from dbc2bsm.services.layout_service import reconcile

logger = logging.getLogger(__name__)

_BAUDRATE_COMMENT = "Should be either {}, or '{}'".format(
    ", ".join(f"'{rate}'" for rate in CAN_BAUDRATES[:-1]), CAN_BAUDRATES[-1],
)


def _comment(text: str) -> ET.Element:
    # "--" may not appear inside an XML comment
    return ET.Comment(f" {text.replace('--', '- -')} ")


def _handle_reference(parent: ET.Element, name: str) -> None:
    """Add the <S Name="HANDLE"> parameter pointing at the open device."""
    handle = ET.SubElement(parent, 'S', {'Name': HANDLE_PARAMETER})
    ET.SubElement(handle, 'PC', {
        'Name': name,
        'ConditionedName': OPEN_PROCEDURE_NAME,
        'Parameter': HANDLE_PARAMETER,
    })


class DocumentService:
    """Service for building and writing beSTORM documents.

    Attributes:
        settings: BsmSettings used for the device parameters
        _clock: Callable returning a struct_time for the timestamp comment
    """

    def __init__(self, settings: Optional[BsmSettings] = None,
                 clock: Callable[[], time.struct_time] = time.localtime):
        self.settings = settings or BsmSettings()
        self._clock = clock

    def reconcile_all(self, messages: Iterable[MessageDef]) -> List[FrameLayout]:
        """Reconcile every message, stopping at the first failure."""
        return [reconcile(m, self.settings.oversize_policy) for m in messages]

    def build_document(self, messages: Iterable[MessageDef],
                       include_timestamp: Optional[bool] = None) -> ET.Element:
        """Build the complete document tree for a message list.

        Args:
            messages: Messages in output order
            include_timestamp: Add a generation time comment. Defaults to
                               settings.include_timestamp.

        Returns:
            Root <beSTORM> element

        Raises:
            ConversionError: a message failed reconciliation
        """
        if include_timestamp is None:
            include_timestamp = self.settings.include_timestamp
        layouts = self.reconcile_all(messages)

        root = ET.Element('beSTORM', {'Version': BESTORM_VERSION})
        generator = ET.SubElement(root, 'GeneratorOptSettings')
        ET.SubElement(generator, 'BT', {
            'FactoryDefined': '1',
            'MaxBytesToGenerate': str(self.settings.max_bytes_to_generate),
            'FactoryType': FACTORY_TYPE,
        })
        module_settings = ET.SubElement(root, 'ModuleSettings')
        module = ET.SubElement(module_settings, 'M', {'Name': MODULE_NAME})
        protocol = ET.SubElement(module, 'P', {'Name': PROTOCOL_NAME})
        sequence = ET.SubElement(protocol, 'SC', {'Name': SEQUENCE_NAME})

        self._add_open_device(sequence)
        self._add_set_globals(sequence)

        messages_element = ET.SubElement(sequence, 'SE', {'Name': MESSAGES_NAME})
        messages_element.append(_comment(PROVENANCE_COMMENT))
        if include_timestamp:
            stamp = self._timestamp_text()
            if stamp is not None:
                messages_element.append(_comment(stamp))

        for layout in layouts:
            self._add_message(messages_element, layout)

        self._add_close_device(sequence)
        return root

    def render(self, root: ET.Element) -> str:
        """Serialize a document tree to text with tab indentation."""
        ET.indent(root, space='\t')
        body = ET.tostring(root, encoding='unicode')
        return f"{XML_DECLARATION}\n{body}\n"

    def render_messages(self, messages: Iterable[MessageDef],
                        include_timestamp: Optional[bool] = None) -> str:
        return self.render(self.build_document(messages, include_timestamp))

    def convert(self, messages: Iterable[MessageDef], sink: TextIO,
                include_timestamp: Optional[bool] = None) -> int:
        """Convert messages and write the document to sink.

        The whole document is rendered before the first write.

        Args:
            messages: Messages in output order
            sink: Writable text stream
            include_timestamp: See build_document()

        Returns:
            Number of characters written

        Raises:
            ConversionError: a message failed reconciliation (nothing written)
            SinkWriteError: writing to sink failed
        """
        messages = list(messages)
        document = self.render_messages(messages, include_timestamp)
        try:
            sink.write(document)
            flush = getattr(sink, 'flush', None)
            if flush is not None:
                flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write beSTORM document: {e}", exc_info=True)
            raise SinkWriteError(f"Failed to write beSTORM document: {e}", original_error=e) from e

        logger.info(f"Converted {len(messages)} messages to beSTORM XML ({len(document)} characters)")
        return len(document)

    def _timestamp_text(self) -> Optional[str]:
        # Best-effort: a failure only drops the comment
        try:
            return TIMESTAMP_COMMENT_PREFIX + time.asctime(self._clock())
        except (TypeError, ValueError, OverflowError, OSError) as e:
            logger.warning(f"Could not format generation timestamp: {e}")
            return None

    def _add_open_device(self, sequence: ET.Element) -> None:
        procedure = ET.SubElement(sequence, 'SP', {
            'Name': OPEN_PROCEDURE_NAME,
            'Library': self.settings.library,
            'Procedure': 'OpenDevice',
        })
        ip_address = ET.SubElement(procedure, 'S', {'Name': 'IPAddress'})
        ET.SubElement(ip_address, 'EV', {
            'Name': 'IPAddress',
            'Description': 'CAN IP Address',
            'ASCIIValue': self.settings.ip_address,
            'Required': '1',
        })
        port = ET.SubElement(procedure, 'S', {'Name': 'Port'})
        ET.SubElement(port, 'EV', {
            'Name': 'Port',
            'Description': 'CAN Port',
            'ASCIIValue': str(self.settings.port),
            'Required': '1',
            'Comment': 'Should be either 0, 1, 2, or 3',
        })

    def _add_set_globals(self, sequence: ET.Element) -> None:
        procedure = ET.SubElement(sequence, 'SP', {
            'Name': 'CAN SetGlobals',
            'Library': self.settings.library,
            'Procedure': 'SetGlobals',
        })
        _handle_reference(procedure, MODULE_NAME)
        baudrate = ET.SubElement(procedure, 'S', {'Name': 'Baudrate'})
        ET.SubElement(baudrate, 'EV', {
            'Name': 'Baudrate',
            'Description': 'Baudrate',
            'ASCIIValue': str(self.settings.baudrate),
            'Required': '1',
            'Comment': _BAUDRATE_COMMENT,
        })

    def _add_message(self, parent: ET.Element, layout: FrameLayout) -> None:
        """Add the "CAN Send" procedure for one reconciled message."""
        procedure = ET.SubElement(parent, 'SP', {
            'Name': f"CAN Send ({layout.message_name} - {layout.frame_id})",
            'Library': self.settings.library,
            'Procedure': 'Write',
        })
        _handle_reference(procedure, HANDLE_PARAMETER)
        identifier = ET.SubElement(procedure, 'S', {'Name': 'Identifier'})
        ET.SubElement(identifier, 'C', {'Name': 'Identifier'}).text = str(layout.frame_id)
        data = ET.SubElement(procedure, 'S', {'ParamName': 'Data', 'Name': 'Message'})
        bits = ET.SubElement(data, 'BC', {
            'Name': 'Message Bits',
            'PaddingSize': str(layout.padding_size),
            'PaddingBit': '0',
        })
        for descriptor in emit_layout(layout):
            ET.SubElement(bits, 'BB', {
                'Name': descriptor.name,
                'Bits': str(descriptor.bits),
                'Size': str(descriptor.size),
            })
        logger.debug(f"Added {layout.message_name} with PaddingSize={layout.padding_size}")

    def _add_close_device(self, sequence: ET.Element) -> None:
        procedure = ET.SubElement(sequence, 'SP', {
            'Name': 'CAN Close',
            'Library': self.settings.library,
            'Procedure': 'CloseDevice',
        })
        _handle_reference(procedure, MODULE_NAME)
