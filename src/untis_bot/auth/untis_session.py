"""
WebUntis session management and authentication.

Talks to the WebUntis JSON-RPC endpoint at
https://<subdomain>.webuntis.com/WebUntis/jsonrpc.do?school=<school>.

The unauthenticated ``UntisClient`` can only log in. Logging in yields an
``UntisSession`` that owns the session token and is the only object able to
fetch data.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

import requests

from untis_bot.config import Settings, get_settings
from untis_bot.errors import (
    AuthError,
    ProtocolError,
    SessionRequiredError,
    TransportError,
)

logger = logging.getLogger(__name__)

# WebUntis ignores the request id, but JSON-RPC 2.0 requires one
REQUEST_ID = "untis-bot"


class UntisClient:
    """
    Unauthenticated WebUntis JSON-RPC client.

    Handles:
    - JSON-RPC 2.0 envelopes over HTTP POST
    - Error mapping to TransportError / ProtocolError
    - Authentication, which hands out an UntisSession
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Optional settings instance, will use default if not provided
            http: Optional requests session (mainly for tests)
        """
        self.settings = settings or get_settings()
        self.base_url = self.settings.untis_base_url
        self.timeout = self.settings.request_timeout

        self.http = http or requests.Session()
        self.http.headers.update({
            "Accept": "application/json",
            "User-Agent": "untis-bot",
        })

    def call(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> Any:
        """
        Perform one JSON-RPC call and return its ``result`` member.

        Args:
            method: JSON-RPC method name
            params: Method parameters, ``{}`` if not given
            session_id: Session token sent as JSESSIONID cookie

        Returns:
            The decoded ``result`` member of the response

        Raises:
            TransportError: On network failure or non-2xx status
            ProtocolError: If the body is not a JSON-RPC result
        """
        payload = {
            "id": REQUEST_ID,
            "method": method,
            "params": params or {},
            "jsonrpc": "2.0",
        }
        headers = {}
        if session_id is not None:
            headers["Cookie"] = f"JSESSIONID={session_id}"

        logger.debug(f"JSON-RPC call: {method}")
        try:
            response = self.http.post(
                self.base_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProtocolError(f"{method} returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise ProtocolError(f"{method} returned an unexpected payload")

        if body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                detail = f"{error.get('code')}: {error.get('message')}"
            else:
                detail = str(error)
            raise ProtocolError(f"{method} failed with JSON-RPC error {detail}")

        if "result" not in body:
            raise ProtocolError(f"{method} response has no result")

        return body["result"]

    def authenticate(self) -> "UntisSession":
        """
        Authenticate with WebUntis using username/password.

        Returns:
            UntisSession: Session holding the token

        Raises:
            AuthError: If the call fails or no session id is returned
        """
        logger.info(
            f"Authenticating against {self.settings.untis_subdomain}.webuntis.com "
            f"as {self.settings.untis_username}"
        )
        params = {
            "user": self.settings.untis_username,
            "password": self.settings.untis_password,
            "client": self.settings.untis_client_id,
        }
        try:
            result = self.call("authenticate", params)
        except (TransportError, ProtocolError) as e:
            raise AuthError(f"Authentication failed: {e}") from e

        session_id = result.get("sessionId") if isinstance(result, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise AuthError("Authentication response contains no session id")

        logger.info("Authentication successful")
        return UntisSession(self, session_id)

    @contextmanager
    def login(self) -> Iterator["UntisSession"]:
        """
        Context manager that authenticates on entry and logs out on exit.

        Yields:
            UntisSession: Authenticated session
        """
        session = self.authenticate()
        try:
            yield session
        finally:
            session.logout()


class UntisSession:
    """
    Authenticated WebUntis session.

    Created by ``UntisClient.authenticate()``. After ``logout()`` the
    session is dead and every further call raises SessionRequiredError.
    """

    def __init__(self, client: UntisClient, session_id: str):
        self.client = client
        self._session_id: Optional[str] = session_id

    @property
    def is_authenticated(self) -> bool:
        """Check if session is still usable."""
        return self._session_id is not None

    def _call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if self._session_id is None:
            raise SessionRequiredError(
                f"Cannot call {method}: not authenticated. Call authenticate() first."
            )
        return self.client.call(method, params, session_id=self._session_id)

    def get_subjects(self) -> List[Dict[str, Any]]:
        """
        Fetch all subjects of the school.

        Returns:
            list: Raw subject records (``id``, ``name``, ``longName``, ...)
        """
        result = self._call("getSubjects")
        if not isinstance(result, list):
            raise ProtocolError("getSubjects did not return a list")
        return result

    def get_timetable(self, start: date, end: date) -> List[Dict[str, Any]]:
        """
        Fetch the timetable of the configured class.

        Args:
            start: First day (inclusive)
            end: Last day (inclusive)

        Returns:
            list: Raw timetable records
        """
        params = {
            "id": self.client.settings.untis_class_id,
            "type": 1,
            "startDate": start.strftime("%Y%m%d"),
            "endDate": end.strftime("%Y%m%d"),
        }
        result = self._call("getTimetable", params)
        if not isinstance(result, list):
            raise ProtocolError("getTimetable did not return a list")
        return result

    def logout(self) -> bool:
        """
        Log out from WebUntis.

        Logout is advisory cleanup: failures are logged, never raised.

        Returns:
            bool: True if WebUntis confirmed the logout
        """
        if self._session_id is None:
            return False

        try:
            self.client.call("logout", session_id=self._session_id)
            logger.info("Logged out from WebUntis")
            return True
        except (TransportError, ProtocolError) as e:
            logger.warning(f"Logout failed: {e}")
            return False
        finally:
            self._session_id = None
