"""
Fungible Asset Schema Tags

Field, owned right and transition type tags of the fungible asset schema.
The values are opaque constants shared with the validation engine; this
package only compares them.
"""

from enum import IntEnum


class FieldType(IntEnum):
    """Metadata field types."""
    TICKER = 0x00
    NAME = 0x01
    CONTRACT = 0x02
    PRECISION = 0x03
    TIMESTAMP = 0x04
    ISSUED_SUPPLY = 0xA0
    BURNED_SUPPLY = 0xB0
    HISTORY_PROOF = 0xB1
    HISTORY_PROOF_FORMAT = 0xB2


class OwnedRightType(IntEnum):
    """Owned right (state assignment) types."""
    INFLATION = 0xA0
    ASSETS = 0xA1
    OPEN_EPOCH = 0xB0
    BURN_REPLACE = 0xB1
    RENOMINATION = 0xC0


class TransitionType(IntEnum):
    """State transition types."""
    TRANSFER = 0x00
    ISSUE = 0x01
    EPOCH = 0x10
    BURN = 0x11
    BURN_AND_REPLACE = 0x12
    RENOMINATION = 0x20
    RIGHTS_SPLIT = 0xF0


def _parse_tag(enum_cls, value):
    """Accept a tag by enum, integer, decimal string or name ("ISSUED_SUPPLY")."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        if value.isdigit():
            return enum_cls(int(value))
        try:
            return enum_cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown {enum_cls.__name__} '{value}'") from None
    return enum_cls(value)


def field_type(value) -> FieldType:
    return _parse_tag(FieldType, value)


def owned_right_type(value) -> OwnedRightType:
    return _parse_tag(OwnedRightType, value)


def transition_type(value) -> TransitionType:
    return _parse_tag(TransitionType, value)
