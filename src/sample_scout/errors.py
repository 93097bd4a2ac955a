"""
Exception types shared across Sample Scout.

Per-asset problems (an unreadable subtree, a corrupt audio file) are handled
where they happen and reported as values; these exceptions only cross module
boundaries between a collaborator and the component that absorbs it.
"""


class SampleScoutError(Exception):
    """Base class for all Sample Scout errors."""


class DecodeError(SampleScoutError):
    """Source audio could not be read or decoded into peaks."""

    def __init__(self, asset: str, reason: str):
        self.asset = asset
        self.reason = reason
        super().__init__(f"Failed to decode {asset}: {reason}")


class CacheUnavailable(SampleScoutError):
    """Cache root directory cannot be created or written."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Waveform cache unavailable at {root}: {reason}")


class RecordNotFound(SampleScoutError, KeyError):
    """No media record with the requested identity."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(identity)

    def __str__(self) -> str:
        return f"No media record for {self.identity!r}"
