"""Log-safe masking of secret values and credentials."""

from __future__ import annotations

NOT_SET = "<not set>"
SHORT_MASK = "***"


def _mask(value: str | None, keep: int) -> str:
    if not value:
        return NOT_SET
    if len(value) <= 8:
        return SHORT_MASK
    return value[:keep] + "..." + value[len(value) - keep:]


def mask_secret_value(value: str | None) -> str:
    """Mask a secret value for debug logging: 'abcdefghij' -> 'ab...ij'."""
    return _mask(value, 2)


def mask_credential(value: str | None) -> str:
    """Mask a process credential for start-up logging: 'abcdefghij' -> 'abcd...ghij'."""
    return _mask(value, 4)
