"""
Command line entry point: convert a DBC file into a beSTORM XML module.

Examples:
  # Write the document to stdout
  dbc2bsm vehicle.dbc

  # Write to a file with a generation timestamp comment
  dbc2bsm vehicle.dbc -o vehicle.bsm.xml --timestamps

  # Inspect the reconciled bit layouts as JSON
  dbc2bsm vehicle.dbc --dump-layout
"""
import os
import sys
import json
import argparse
import tempfile
import logging
from typing import List, Optional

from dbc2bsm.config import ConfigManager, configure_logging
from dbc2bsm.constants import CAN_BAUDRATES, CAN_PORTS, OVERSIZE_POLICIES
from dbc2bsm.exceptions import Dbc2BsmException, SinkWriteError
from dbc2bsm.services.dbc_service import DbcService
from dbc2bsm.services.document_service import DocumentService
from dbc2bsm.services.layout_service import layout_to_dict

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dbc2bsm',
        description='Convert a CAN DBC file into a beSTORM XML module',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Examples:', 1)[1],
    )
    parser.add_argument('input', help='Path to the DBC file')
    parser.add_argument('-o', '--output', help='Output file (default: stdout)')
    parser.add_argument('--timestamps', action='store_true', default=None,
                        help='Add a generation timestamp comment')
    parser.add_argument('--config', help='Path to a JSON config file')
    parser.add_argument('--oversize-policy', choices=OVERSIZE_POLICIES,
                        help='Handling of frames needing more than 32 bits')
    parser.add_argument('--baudrate', type=int, choices=CAN_BAUDRATES,
                        help='CAN baudrate written to SetGlobals')
    parser.add_argument('--port', type=int, choices=CAN_PORTS, help='CAN device port')
    parser.add_argument('--log-level', help='Logging level (default: LOG_LEVEL or INFO)')
    parser.add_argument('--dump-layout', action='store_true',
                        help='Print reconciled layouts as JSON instead of XML')
    return parser


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {e}")


def _replace_file(path: str, text: str) -> None:
    """Write text to a temporary file beside path, then move it over path."""
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.dbc2bsm-', suffix='.tmp', dir=directory)
    except OSError as e:
        raise SinkWriteError(f"Cannot open output file {path}: {e}", original_error=e) from e
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        _discard(tmp_path)
        raise SinkWriteError(f"Failed to write {path}: {e}", original_error=e) from e


def _write(service: DocumentService, messages: list, output: Optional[str], dump_layout: bool) -> None:
    # Reconcile everything before touching the destination
    if dump_layout:
        layouts = [layout_to_dict(layout) for layout in service.reconcile_all(messages)]
        text = json.dumps(layouts, indent=2) + "\n"
    else:
        text = service.render_messages(messages)

    if output is None:
        try:
            sys.stdout.write(text)
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to write to stdout: {e}", original_error=e) from e
        return

    _replace_file(output, text)
    logger.info(f"Wrote {output}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config = ConfigManager(args.config)
    settings = config.bsm_settings
    if args.timestamps:
        settings.include_timestamp = True
    if args.oversize_policy:
        settings.oversize_policy = args.oversize_policy
    if args.baudrate is not None:
        settings.baudrate = args.baudrate
    if args.port is not None:
        settings.port = args.port

    try:
        config.require_valid()
        dbc_service = DbcService()
        dbc_service.load_dbc_file(args.input)
        messages = dbc_service.get_message_definitions()
        _write(DocumentService(settings), messages, args.output, args.dump_layout)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except Dbc2BsmException as e:
        kind = getattr(e, 'kind', None)
        if kind is not None:
            logger.error(f"Conversion failed ({kind.value}): {e}")
        else:
            logger.error(f"Conversion failed: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
