"""
Remote search interface for sample sources.

Remote services (sound libraries with a search API) live outside the core.
They hand over complete result sets as (remote_id, metadata) pairs, which
replace the media database snapshot. Network calls, token refresh and
response parsing are the provider's business, not the core's.
"""

from typing import Any, Dict, List, Protocol, Tuple

SearchResults = List[Tuple[str, Dict[str, Any]]]


class RemoteSearch(Protocol):
    """Protocol for remote sample search providers.

    Example:

        class FakeSearch:
            def search(self, query: str) -> SearchResults:
                return [("1234", {"name": "kick.wav", "duration": 0.4, "tags": ["kick"]})]
    """

    def search(self, query: str) -> SearchResults:
        """Search the remote catalog.

        Args:
            query: Search query string

        Returns:
            [(remote_id, metadata), ...] - a full replacement result set
        """
        ...
