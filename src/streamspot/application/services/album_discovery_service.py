"""Album discovery: every album id reachable from the tracked artists."""

import asyncio
import logging
from collections.abc import Iterable

from streamspot.domain.exceptions import ExternalServiceError
from streamspot.domain.ports import ISpotifyClient, IWebPlayerClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 13


class AlbumDiscoveryService:
    """Collects album ids per artist from two catalogs, retrying failed artists.

    Hey future me - each artist is asked twice: the Spotify catalog (own
    albums, singles, compilations) and the scraper's "appears on" list. If
    either query fails the artist goes into the next round, but whatever
    succeeded is kept. Rounds repeat for the failed artists only, up to
    ``max_attempts``. One artist that keeps failing never costs us the albums
    of all the others.
    """

    def __init__(
        self,
        spotify_client: ISpotifyClient,
        webplayer_client: IWebPlayerClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.spotify_client = spotify_client
        self.webplayer_client = webplayer_client
        self.max_attempts = max_attempts

    async def discover(self, artist_ids: Iterable[str]) -> set[str] | None:
        """Union of album ids over all artists.

        Returns:
            The accumulated ids (partial success preserved), or None when
            there were no artists, or when every round failed and nothing was
            accumulated.
        """
        pending = set(artist_ids)
        if not pending:
            return None

        accumulated: set[str] = set()
        attempt = 0
        while pending and attempt < self.max_attempts:
            results = await asyncio.gather(
                *(self._query_artist(artist_id) for artist_id in pending)
            )
            failed: set[str] = set()
            for artist_id, album_ids, ok in results:
                accumulated |= album_ids
                if not ok:
                    failed.add(artist_id)
            attempt += 1
            if failed:
                logger.warning(
                    "Album discovery round %d/%d: %d of %d artists failed",
                    attempt,
                    self.max_attempts,
                    len(failed),
                    len(pending),
                )
            pending = failed

        if pending:
            logger.error(
                "Album discovery gave up on %d artists after %d rounds: %s",
                len(pending),
                attempt,
                sorted(pending),
            )
            if not accumulated:
                return None

        logger.info("Discovered %d albums", len(accumulated))
        return accumulated

    async def _query_artist(self, artist_id: str) -> tuple[str, set[str], bool]:
        """Query both catalogs for one artist.

        Returns:
            (artist_id, album ids from the queries that succeeded, both succeeded)
        """
        results = await asyncio.gather(
            self.spotify_client.get_artist_album_ids(artist_id),
            self.webplayer_client.get_artist_appears_on(artist_id),
            return_exceptions=True,
        )
        album_ids: set[str] = set()
        ok = True
        for source, result in zip(("catalog", "appears_on"), results, strict=True):
            if isinstance(result, ExternalServiceError):
                logger.warning(
                    "Album discovery %s query failed for artist %s: %s",
                    source,
                    artist_id,
                    result.message,
                )
                ok = False
            elif isinstance(result, BaseException):
                raise result
            else:
                album_ids.update(result)
        return artist_id, album_ids, ok
