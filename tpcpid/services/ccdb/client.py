"""
CcdbClient service - Fetches objects from the CCDB REST API.

Single responsibility: Turn an object path into the raw ROOT blob stored
in the conditions database, honouring the timestamp policy.
"""

import io
import logging
import time
from typing import Optional

import requests
import uproot

from tpcpid.domain.exceptions import ParameterSourceError
from .cache import BlobCache


def now_ms() -> int:
    return int(time.time() * 1000)


class CcdbClient:
    """
    Minimal CCDB client.

    Objects are requested as ``<url>/<path>/<timestamp>``; the server
    answers with (or redirects to) a ROOT file holding the object under
    the key ``ccdb_object``.
    """

    OBJECT_KEY = "ccdb_object"

    def __init__(
        self,
        url: str,
        timestamp: int = 0,
        timeout: int = 60,
        cache: Optional[BlobCache] = None,
        created_not_after: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize CCDB client.

        Args:
            url: Base URL of the CCDB server
            timestamp: Validity timestamp in ms; 0 queries the latest object
            timeout: Timeout for HTTP requests in seconds
            cache: Optional on-disk cache, used for pinned timestamps only
            created_not_after: Ignore objects uploaded after this time (ms);
                defaults to the client creation time
            session: Optional requests session
        """
        self.url = url.rstrip("/")
        self.timestamp = timestamp
        self.timeout = timeout
        self.cache = cache
        self.created_not_after = created_not_after if created_not_after is not None else now_ms()
        self._session = session
        self._owns_session = session is None
        self._memory: dict[tuple[str, int], bytes] = {}

        if self.timestamp != 0:
            logging.info(f"Initialising CCDB access for fixed timestamp {self.timestamp}")

    @property
    def session(self) -> requests.Session:
        """HTTP session, opened on the first request."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def close(self):
        """Close the HTTP session if this client opened it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    @property
    def is_pinned(self) -> bool:
        return self.timestamp != 0

    def query_timestamp(self) -> int:
        """Timestamp sent to the server."""
        return self.timestamp if self.is_pinned else now_ms()

    def object_url(self, key: str, timestamp: int) -> str:
        return f"{self.url}/{key.strip('/')}/{timestamp}"

    def fetch_blob(self, key: str) -> bytes:
        """
        Fetch the raw ROOT blob of an object.

        Raises:
            ParameterSourceError: If the server cannot deliver the object
        """
        timestamp = self.query_timestamp()
        memo_key = (key, timestamp if self.is_pinned else 0)
        if memo_key in self._memory:
            return self._memory[memo_key]

        if self.is_pinned and self.cache is not None:
            cached = self.cache.load(key, timestamp)
            if cached:
                self._memory[memo_key] = cached
                return cached

        url = self.object_url(key, timestamp)
        logging.info(f"Fetching CCDB object {url}")
        try:
            response = self.session.get(
                url,
                headers={"If-Not-After": str(self.created_not_after)},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ParameterSourceError(f"Could not fetch CCDB object {key}: {e}") from e

        data = response.content
        if not data:
            raise ParameterSourceError(f"CCDB returned an empty object for {key}")

        self._memory[memo_key] = data
        if self.is_pinned and self.cache is not None:
            try:
                self.cache.save(key, timestamp, data)
            except TimeoutError as e:
                logging.warning(f"Could not save to cache: {e}")
        return data

    def get_object(self, key: str):
        """
        Fetch and deserialise an object.

        Raises:
            ParameterSourceError: If the object cannot be fetched or read
        """
        data = self.fetch_blob(key)
        try:
            with uproot.open(io.BytesIO(data)) as f:
                if self.OBJECT_KEY not in f:
                    raise ParameterSourceError(f"CCDB blob for {key} has no {self.OBJECT_KEY}")
                return f[self.OBJECT_KEY]
        except ParameterSourceError:
            raise
        except Exception as e:
            raise ParameterSourceError(f"Could not read CCDB object {key}: {e}") from e
