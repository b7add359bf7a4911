"""
Read-only message and signal records consumed by the converter.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Tuple


@dataclass(frozen=True)
class SignalDef:
    """A named bit-field within a CAN message.

    Attributes:
        name: Signal name
        start_bit: Raw DBC start bit (0-based offset within the frame)
        bit_length: Width in bits (>= 1)
        is_multiplexor: True if this signal selects the multiplexed layout
        is_multiplexed: True if this signal belongs to a multiplexed layout
        units: Physical unit text (may be empty)
    """
    name: str
    start_bit: int
    bit_length: int
    is_multiplexor: bool = False
    is_multiplexed: bool = False
    units: str = ""

    def __post_init__(self):
        """Validate signal fields after initialization."""
        if not self.name:
            raise ValueError("signal name must be a non-empty string")
        if self.start_bit < 0:
            raise ValueError(f"start bit must be >= 0, got {self.start_bit} for {self.name}")
        if self.bit_length < 1:
            raise ValueError(f"bit length must be >= 1, got {self.bit_length} for {self.name}")

    @property
    def end_bit(self) -> int:
        """Bit position just past the signal."""
        return self.start_bit + self.bit_length

    @classmethod
    def from_cantools(cls, signal: Any) -> "SignalDef":
        """Build a SignalDef from a cantools Signal.

        The DBC start bit is taken as-is; byte order is not interpreted.
        """
        return cls(
            name=signal.name,
            start_bit=int(signal.start),
            bit_length=int(signal.length),
            is_multiplexor=bool(getattr(signal, 'is_multiplexer', False)),
            is_multiplexed=getattr(signal, 'multiplexer_ids', None) is not None,
            units=getattr(signal, 'unit', None) or "",
        )


@dataclass(frozen=True)
class MessageDef:
    """A CAN message and its signals in declaration order.

    Attributes:
        name: Message name
        frame_id: CAN identifier
        signals: Signals in the order they were declared
    """
    name: str
    frame_id: int
    signals: Tuple[SignalDef, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError("message name must be a non-empty string")
        if self.frame_id < 0:
            raise ValueError(f"frame id must be >= 0, got {self.frame_id} for {self.name}")
        object.__setattr__(self, 'signals', tuple(self.signals))

    @classmethod
    def from_cantools(cls, message: Any) -> "MessageDef":
        """Build a MessageDef from a cantools Message."""
        return cls(
            name=message.name,
            frame_id=int(message.frame_id),
            signals=tuple(SignalDef.from_cantools(s) for s in message.signals),
        )


def messages_from_cantools(messages: Iterable[Any]) -> list:
    """Convert an iterable of cantools messages, keeping their order."""
    return [MessageDef.from_cantools(m) for m in messages]
