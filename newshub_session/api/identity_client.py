"""News Hub identity service client"""

from typing import Any, Dict, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import ConnectTimeoutError, MaxRetryError, NewConnectionError

from ..utils.exceptions import (
    ConnectivityError,
    InvalidCredentialsError,
    MalformedResponseError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _is_connect_failure(error: BaseException) -> bool:
    """True when the request never reached the server (safe to resend)"""
    if isinstance(error, requests.exceptions.ConnectTimeout):
        return True
    if not isinstance(error, requests.ConnectionError) or not error.args:
        return False
    reason = error.args[0]
    if isinstance(reason, MaxRetryError):
        reason = reason.reason
    # NewConnectionError covers refused connections and DNS failures
    return isinstance(reason, (NewConnectionError, ConnectTimeoutError))


class IdentityClient:
    """Client for the login/signup endpoints of the identity service"""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        login_path: str = "/api/auth/login",
        signup_path: str = "/api/auth/signup",
        timeout: Optional[float] = None,
        max_attempts: int = 3,
        backoff_min: float = 0.5,
        backoff_max: float = 4.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.login_path = login_path
        self.signup_path = signup_path
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, url: str, payload: Dict[str, Any]):
        """POST, resending only when no connection was made"""

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=self.backoff_min, max=self.backoff_max),
            retry=retry_if_exception(_is_connect_failure),
            reraise=True,
        )
        def _post():
            return self.session.request(
                method="POST",
                url=url,
                json=payload,
                timeout=self.timeout,
            )

        return _post()

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        """
        POST a JSON payload and return the decoded body.

        Raises:
            InvalidCredentialsError: Non-2xx response
            MalformedResponseError: 2xx response whose body is not JSON
            ConnectivityError: Transport failure (refused, DNS, timeout)
        """
        url = self._url(path)
        logger.info("Sending identity request", url=url, email=payload.get("email"))

        try:
            response = self._send(url, payload)
        except requests.exceptions.Timeout as e:
            logger.error("Identity request timed out", url=url, timeout=self.timeout, error=str(e))
            raise ConnectivityError(f"Request timed out after {self.timeout} seconds")
        except requests.exceptions.RequestException as e:
            logger.error("Identity request failed", url=url, error=str(e))
            raise ConnectivityError(f"Unable to reach identity service: {str(e)}")

        status_code = response.status_code
        logger.info("Received identity response", url=url, status_code=status_code)

        if not 200 <= status_code < 300:
            raise InvalidCredentialsError(self._error_message(response), status_code=status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error("Identity response is not JSON", url=url, status_code=status_code)
            raise MalformedResponseError(f"Response body is not valid JSON: {str(e)}")

    @staticmethod
    def _error_message(response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            message = body.get("message")
            if isinstance(message, str) and message:
                return message
        return None

    def login(self, email: str, password: str) -> Any:
        return self._post(self.login_path, {"email": email, "password": password})

    def signup(self, name: str, email: str, password: str, role: str = "user") -> Any:
        return self._post(
            self.signup_path,
            {"name": name, "email": email, "password": password, "role": role},
        )

    def close(self) -> None:
        self.session.close()
