import re
from decimal import Context, Decimal
from typing import Any

BYTES32_HEX_LENGTH = 64
ADDRESS_HEX_LENGTH = 40

_BYTES32_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")

# wide enough for uint256 base units at any decimals we scale by
_DECIMAL_CONTEXT = Context(prec=200)


def to_hex_str(value: Any) -> str:
    """Render str/bytes/int values returned by the different APIs as hex text."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, int) and not isinstance(value, bool):
        return format(value, "x")
    raise TypeError(f"cannot interpret {type(value).__name__} as hex")


def sanitize_hex(value: Any) -> str:
    x = to_hex_str(value).strip()
    if x[:2] in ("0x", "0X"):
        return x[2:]
    return x


def hex_prefix(value: Any) -> str:
    x = sanitize_hex(value)
    if len(x) == 0:
        return x
    return "0x" + x


def fix_width(value: str, digits: int) -> str:
    """Left-pad with zeros, or keep the trailing ``digits`` characters."""
    if len(value) > digits:
        return value[len(value) - digits :]
    return value.rjust(digits, "0")


def canonicalize_bytes32(value: Any) -> str:
    return fix_width(sanitize_hex(value).lower(), BYTES32_HEX_LENGTH)


def canonicalize_address(value: Any) -> str:
    return fix_width(sanitize_hex(value).lower(), ADDRESS_HEX_LENGTH)


def bytes32_equals(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return canonicalize_bytes32(a) == canonicalize_bytes32(b)


def address_equals(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return canonicalize_address(a) == canonicalize_address(b)


def is_valid_bytes32(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return _BYTES32_PATTERN.match(sanitize_hex(value)) is not None


def parse_unsigned(value: Any) -> int:
    """Parse a non-null, non-negative integer given as int, 0x-hex or decimal text."""
    if value is None:
        raise ValueError("null input")
    if isinstance(value, bool):
        raise ValueError(f"malformed unsigned long: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if "_" in text:
            raise ValueError(f"malformed unsigned long: {value!r}")
        if text[:2] in ("0x", "0X"):
            number = int(text[2:], 16)
        else:
            number = int(text, 10)
    else:
        raise ValueError(f"malformed unsigned long: {value!r}")
    if number < 0:
        raise ValueError(f"malformed unsigned long: {value!r}")
    return number


def parse_nullable_unsigned(value: Any) -> int | None:
    if value is None:
        return None
    return parse_unsigned(value)


def parse_hex_int(value: Any) -> int:
    """Interpret a value as base-16 whether or not it carries a 0x prefix."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = sanitize_hex(value)
    if "_" in text:
        raise ValueError(f"malformed hex quantity: {value!r}")
    return int(text, 16)


def scale_units(base_units: int, decimals: int) -> Decimal:
    return Decimal(base_units).scaleb(-decimals, context=_DECIMAL_CONTEXT)


def format_decimal(value: Decimal) -> str:
    return format(value.normalize(_DECIMAL_CONTEXT), "f")
