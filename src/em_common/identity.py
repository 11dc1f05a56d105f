"""Ledger identities are plain strings; the null identity never owns anything."""

NULL_IDENTITY = "0x0000000000000000000000000000000000000000"


def is_null_identity(identity: str | None) -> bool:
    return not identity or identity == NULL_IDENTITY
