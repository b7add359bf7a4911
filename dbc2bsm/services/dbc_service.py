"""
DBC Service for loading DBC (Database CAN) files.

This service wraps the cantools library and exposes the loaded database as
the read-only MessageDef/SignalDef records the converter works on.
"""
import os
import logging
from typing import Optional, Dict, Any, List

import cantools

from dbc2bsm.exceptions import DbcError
from dbc2bsm.models.dbc_model import MessageDef, messages_from_cantools

logger = logging.getLogger(__name__)


class DbcService:
    """Service for loading DBC files and looking up messages.

    This service provides:
    - Loading and parsing DBC files or DBC text
    - Finding messages by CAN ID
    - Converting the database into MessageDef records

    Attributes:
        database: Loaded cantools database object (None if no DBC loaded)
        dbc_path: Path (or name) of the currently loaded DBC
        _message_cache: Cache mapping CAN ID -> message object
    """

    def __init__(self):
        """Initialize the DBC service."""
        self.database: Optional[Any] = None  # cantools.Database object
        self.dbc_path: Optional[str] = None
        self._message_cache: Dict[int, Any] = {}

    def load_dbc_file(self, filepath: str) -> bool:
        """Load and parse a DBC file.

        Args:
            filepath: Path to DBC file

        Returns:
            True if loaded successfully

        Raises:
            FileNotFoundError: If DBC file does not exist
            DbcError: If DBC file cannot be parsed
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"DBC file not found: {filepath}")

        logger.info(f"Loading DBC file: {filepath}")
        try:
            # sort_signals=None keeps SG_ declaration order
            db = cantools.database.load_file(filepath, database_format='dbc',
                                             strict=False, sort_signals=None)
        except Exception as e:
            logger.error(f"Failed to load DBC file {filepath}: {e}", exc_info=True)
            self._reset()
            raise DbcError(f"Failed to parse DBC file: {e}", dbc_path=filepath,
                           operation='load', original_error=e) from e

        self._set_database(db, filepath)
        return True

    def load_dbc_string(self, contents: str, name: Optional[str] = None) -> bool:
        """Parse DBC text, e.g. an uploaded file.

        Args:
            contents: DBC file contents
            name: Label to record as dbc_path (optional)

        Raises:
            DbcError: If the text cannot be parsed
        """
        try:
            db = cantools.database.load_string(contents, database_format='dbc',
                                               strict=False, sort_signals=None)
        except Exception as e:
            logger.error(f"Failed to parse DBC {name or '<string>'}: {e}")
            self._reset()
            raise DbcError(f"Failed to parse DBC: {e}", dbc_path=name,
                           operation='parse', original_error=e) from e

        self._set_database(db, name)
        return True

    def _set_database(self, db: Any, path: Optional[str]) -> None:
        self.database = db
        self.dbc_path = path
        self.clear_caches()
        logger.info(f"DBC loaded successfully: {len(db.messages)} messages")

    def _reset(self) -> None:
        self.database = None
        self.dbc_path = None
        self.clear_caches()

    def is_loaded(self) -> bool:
        """Check if a DBC file is currently loaded."""
        return self.database is not None

    def get_all_messages(self) -> List[Any]:
        """Get all cantools messages from the loaded DBC.

        Returns:
            List of message objects, or empty list if no DBC loaded
        """
        if not self.is_loaded():
            return []
        return list(self.database.messages)

    def find_message_by_id(self, can_id: int) -> Optional[Any]:
        """Find a message by its CAN ID.

        Args:
            can_id: CAN identifier (0-0x1FFFFFFF)

        Returns:
            Message object from cantools database, or None if not found
        """
        if not self.is_loaded():
            return None

        if can_id in self._message_cache:
            return self._message_cache[can_id]

        found = None
        for msg in self.database.messages:
            if int(msg.frame_id) == int(can_id):
                found = msg
                break
        # None is cached too, to avoid repeated searches
        self._message_cache[can_id] = found
        return found

    def get_message_definitions(self) -> List[MessageDef]:
        """Return the loaded messages as MessageDef records, in DBC order.

        Raises:
            DbcError: If no DBC is loaded
        """
        if not self.is_loaded():
            raise DbcError("No DBC loaded", operation='get_message_definitions')
        return messages_from_cantools(self.database.messages)

    def clear_caches(self):
        """Clear all caches (call when DBC is reloaded)."""
        self._message_cache.clear()
        logger.debug("Cleared DBC lookup caches")
