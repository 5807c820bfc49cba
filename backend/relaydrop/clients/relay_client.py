# relaydrop/clients/relay_client.py

import logging
import time

import requests

logger = logging.getLogger(__name__)

# =========================
# CONFIGURATION
# =========================

SERVER_URL = "http://127.0.0.1:8000"
INITIAL_BACKOFF_SECONDS = 1.8
BACKOFF_FACTOR = 1.6
MAX_BACKOFF_SECONDS = 10.0
EXPIRY_BUFFER_SECONDS = 30


class RelayClientError(Exception):
    def __init__(self, status_code: int, code: str, detail: str = ""):
        self.status_code = status_code
        self.code = code
        self.detail = detail
        super().__init__(f"{status_code} {code}: {detail}")


class SessionExpired(Exception):
    pass


# =========================
# RELAY CLIENT
# =========================

class RelayClient:
    def __init__(self, server_url: str = SERVER_URL, session=None, timeout: float = 10.0):
        self.server_url = server_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, path: str, body: dict | None = None) -> dict:
        resp = self.session.post(f"{self.server_url}{path}", json=body or {}, timeout=self.timeout)
        if resp.status_code != 200:
            try:
                data = resp.json()
            except ValueError:
                data = {}
            raise RelayClientError(resp.status_code, data.get("error", "http_error"), data.get("detail", resp.text))
        return resp.json()

    def create_session(self) -> dict:
        """Returns token, short_code, expires_in_seconds and share_url."""
        return self._post("/api/session")

    def send(self, identifier: str, message: dict) -> int:
        return self._post("/api/send", {"identifier": identifier, "message": message})["expires_in_seconds"]

    def receive(self, identifier: str) -> dict | None:
        return self._post("/api/receive", {"identifier": identifier})["message"]

    def wait_for_message(self, identifier: str, expires_in_seconds: int, sleep=time.sleep, clock=time.monotonic) -> dict:
        """
        Poll with growing backoff until a message arrives. Raises
        SessionExpired once the session TTL (plus a buffer) has passed.
        """
        start = clock()
        backoff = INITIAL_BACKOFF_SECONDS
        while True:
            if clock() - start > expires_in_seconds + EXPIRY_BUFFER_SECONDS:
                raise SessionExpired(identifier)
            message = self.receive(identifier)
            if message is not None:
                return message
            logger.debug("No message yet, retrying in %.1fs", backoff)
            sleep(backoff)
            backoff = min(backoff * BACKOFF_FACTOR, MAX_BACKOFF_SECONDS)
