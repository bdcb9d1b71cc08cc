from __future__ import annotations


class PrefixAtlasError(Exception):
    """Core-level exception normalized into an error body by the tool layer."""

    default_detail = "UUID could not be processed."
    code = "error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidFormat(PrefixAtlasError, ValueError):
    default_detail = "Invalid UUID format"
    code = "invalid_format"


class TooShort(PrefixAtlasError, ValueError):
    default_detail = "UUID needs to be at least 12 characters"
    code = "too_short"


class RandomnessUnavailable(PrefixAtlasError, RuntimeError):
    default_detail = "Secure randomness is unavailable; UUID generation aborted."
    code = "randomness_unavailable"


__all__ = [
    "InvalidFormat",
    "PrefixAtlasError",
    "RandomnessUnavailable",
    "TooShort",
]
