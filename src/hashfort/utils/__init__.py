def as_bytes(value: str | bytes | bytearray | memoryview) -> bytes:
    """Coerce password-like input to bytes. ``str`` is encoded as UTF-8."""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)
