"""
Constants for the DBC to beSTORM converter.

This module centralizes the frame sizing rules, block naming conventions and
the protocol parameters written into the beSTORM CAN module. Values are
immutable module data; nothing here is written at runtime.

Constants are organized by category:
- Frame padding and block sizing
- Block naming conventions
- beSTORM document structure
- Default CAN device settings
"""

# Frame padding (bits). PaddingSize must be one of these values.
PADDING_SIZES = (8, 16, 24, 32)
MAX_PADDING_SIZE = PADDING_SIZES[-1]

# A <BB> element is assumed to hold at most 16 bits (0xXX 0x00)
BLOCK_SIZE_BITS = 16

# Descriptors carry no absolute position, beSTORM infers it from order
DESCRIPTOR_BIT_OFFSET = 0

# Block naming
UNKNOWN_BLOCK_NAME = "UNKNOWN"
LSB_SUFFIX = " (LSB)"
MSB_SUFFIX = " (MSB)"

# Oversized frame policies
OVERSIZE_POLICY_REJECT = "reject"
OVERSIZE_POLICY_CLAMP = "clamp"
OVERSIZE_POLICIES = (OVERSIZE_POLICY_REJECT, OVERSIZE_POLICY_CLAMP)

# beSTORM document
BESTORM_VERSION = "1.2"
GENERATOR_NAME = "dbc2bsm"
PROVENANCE_COMMENT = f"Generated by {GENERATOR_NAME}"
TIMESTAMP_COMMENT_PREFIX = "Generated on: "
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
FACTORY_TYPE = "Binary"
MODULE_NAME = "CAN"
PROTOCOL_NAME = "CAN Protocol"
SEQUENCE_NAME = "CAN Sequence"
MESSAGES_NAME = "Messages"
OPEN_PROCEDURE_NAME = "CAN Open"
HANDLE_PARAMETER = "HANDLE"

# Default CAN device settings
CAN_LIBRARY_DEFAULT = "CAN Interface.dll"
CAN_IP_ADDRESS_DEFAULT = "<CAN Device>"
CAN_PORT_DEFAULT = 0
CAN_PORTS = (0, 1, 2, 3)
CAN_BAUDRATE_DEFAULT = 250000
CAN_BAUDRATES = (
    10000, 20000, 50000, 62500, 100000,
    125000, 250000, 500000, 800000, 1000000,
)
MAX_BYTES_TO_GENERATE_DEFAULT = 8
