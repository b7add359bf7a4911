"""
Custom exception classes for the DBC to beSTORM converter.

Conversion failures carry an ``ErrorKind`` so callers can tell a structural
problem in the DBC model apart from an I/O failure on the output sink
without matching on exception text.
"""

from enum import Enum
from typing import Any, Sequence


class ErrorKind(Enum):
    """Reason a conversion was aborted."""
    STRUCTURAL_VIOLATION = "structural_violation"
    OVERSIZED_FRAME = "oversized_frame"
    SINK_WRITE = "sink_write"


class Dbc2BsmException(Exception):
    """Base exception for all converter errors.

    All custom exceptions should inherit from this class to enable
    catching all application-specific errors while preserving exception
    hierarchy.
    """
    pass


class ConversionError(Dbc2BsmException):
    """Exception raised when a message set cannot be converted.

    Attributes:
        kind: ErrorKind describing why conversion stopped
        message_name: Name of the CAN message being converted (if applicable)
        original_error: The underlying exception that caused this error
    """

    kind: ErrorKind = ErrorKind.STRUCTURAL_VIOLATION

    def __init__(self, message: str, message_name: str = None, original_error: Exception = None):
        """Initialize ConversionError.

        Args:
            message: Human-readable error message
            message_name: CAN message name (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.message_name = message_name
        self.original_error = original_error


class MultipleMultiplexorError(ConversionError):
    """Raised when a message declares more than one multiplexor signal.

    Attributes:
        signal_names: Names of the conflicting multiplexor signals
    """

    kind = ErrorKind.STRUCTURAL_VIOLATION

    def __init__(self, message: str, message_name: str = None, signal_names: Sequence[str] = ()):
        super().__init__(message, message_name=message_name)
        self.signal_names = tuple(signal_names)


class OversizedFrameError(ConversionError):
    """Raised when a message needs more padding bits than beSTORM accepts.

    Attributes:
        raw_size: Sum of signal and gap bits for the message
    """

    kind = ErrorKind.OVERSIZED_FRAME

    def __init__(self, message: str, message_name: str = None, raw_size: int = None):
        super().__init__(message, message_name=message_name)
        self.raw_size = raw_size


class SinkWriteError(ConversionError):
    """Raised when the rendered document cannot be written to the output."""

    kind = ErrorKind.SINK_WRITE


class DbcError(Dbc2BsmException):
    """Exception raised for DBC file loading or parsing failures.

    Attributes:
        dbc_path: Path to the DBC file that failed
        operation: Operation that failed (e.g., 'load', 'parse')
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, dbc_path: str = None, operation: str = None, original_error: Exception = None):
        """Initialize DbcError.

        Args:
            message: Human-readable error message
            dbc_path: Path to DBC file (optional)
            operation: Operation that failed (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.dbc_path = dbc_path
        self.operation = operation
        self.original_error = original_error


class ConfigurationError(Dbc2BsmException):
    """Exception raised for invalid configuration values.

    Attributes:
        setting_name: Name of the setting that is invalid
        setting_value: The invalid value
        expected: Description of expected value
    """

    def __init__(self, message: str, setting_name: str = None, setting_value: Any = None,
                 expected: str = None):
        super().__init__(message)
        self.setting_name = setting_name
        self.setting_value = setting_value
        self.expected = expected
