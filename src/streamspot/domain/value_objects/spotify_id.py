"""Canonical id extraction from Spotify resource locators.

Payloads from both sources reference entities by URI, e.g.
``spotify:album:1o59UpKw81iHR0HPiSkJR0``. The store keys everything by the
bare id (third segment).
"""

from streamspot.domain.exceptions import InvalidSpotifyUriError


def id_from_uri(uri: str) -> str:
    """Return the id segment of a ``<namespace>:<type>:<id>`` locator.

    Args:
        uri: Colon-delimited locator from an API payload

    Returns:
        The third segment

    Raises:
        InvalidSpotifyUriError: If the locator has fewer than three segments
    """
    parts = uri.split(":")
    if len(parts) < 3:
        raise InvalidSpotifyUriError(uri)
    return parts[2]
