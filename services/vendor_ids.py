from typing import Any, Iterable

SAP_KEY_WIDTH = 10


def _is_plain_digits(value: str) -> bool:
    return bool(value) and value.isascii() and value.isdigit()


def to_canonical(value: Any) -> str:
    """
    Strip leading zeros from a vendor id ('0000100000' -> '100000').

    Input that is not a non-negative integer string is returned unchanged
    (stringified when it is not a string at all).
    """
    if not isinstance(value, str):
        return str(value)
    candidate = value.strip()
    if not _is_plain_digits(candidate):
        return value
    return str(int(candidate))


def to_sap_key(value: Any, width: int = SAP_KEY_WIDTH) -> str:
    """
    Left-pad a vendor id with zeros to the SAP key width ('100000' -> '0000100000').

    Existing leading zeros are stripped first, so padded and unpadded input
    produce the same key. Non-numeric input is returned without padding.
    """
    if not isinstance(value, str):
        return str(value)
    candidate = value.strip()
    if not _is_plain_digits(candidate):
        return value
    return candidate.lstrip("0").rjust(width, "0")


def vendor_ids_match(left: Any, right: Any) -> bool:
    return to_canonical(left) == to_canonical(right)


def is_vendor_allowed(vendor_id: Any, allowed: Iterable[str]) -> bool:
    """True when ``allowed`` is empty or contains ``vendor_id`` in any padding."""
    allowed = list(allowed or [])
    if not allowed:
        return True
    return any(vendor_ids_match(vendor_id, candidate) for candidate in allowed)


def pad_document_number(value: Any, width: int = SAP_KEY_WIDTH) -> str:
    """
    SAP key form of a document number such as Belnr.

    Numeric input behaves like to_sap_key; anything else is left-padded
    with zeros as given.
    """
    candidate = str(value).strip()
    if _is_plain_digits(candidate):
        return to_sap_key(candidate, width)
    return candidate.rjust(width, "0")
