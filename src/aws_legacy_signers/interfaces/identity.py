from typing import Protocol, runtime_checkable


@runtime_checkable
class Identity(Protocol):
    """An entity that can be used to sign requests."""

    access_key_id: str

    @property
    def secret_bytes(self) -> bytes:
        """The signing secret, exposed only as raw bytes."""
        ...
