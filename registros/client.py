"""
HTTP client for the registry API.

Wraps the REST endpoints in plain method calls and maps error responses to
exceptions carrying the server's message. Requests are never retried.
"""

import logging
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


class RegistryClientError(Exception):
    """Base class for failed registry calls."""

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}


class InvalidRegistro(RegistryClientError):
    """The server (or the client-side check) rejected the input."""


class RegistroNotFound(RegistryClientError):
    pass


class TooManyRequests(RegistryClientError):
    def __init__(self, message, status_code=None, errors=None, retry_after: Optional[int] = None):
        super().__init__(message, status_code, errors)
        self.retry_after = retry_after


class ServiceUnavailable(RegistryClientError):
    """The server failed or could not be reached."""


ERRORS_BY_STATUS = {
    400: InvalidRegistro,
    404: RegistroNotFound,
}


class RegistryClient:
    """Thin wrapper around the ``/registros`` endpoints."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str = "", payload: Optional[Dict] = None):
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Error calling {method} {url}: {e}")
            raise ServiceUnavailable(f"No se pudo contactar el servidor: {e}") from e

        if response.ok:
            return response.json()
        raise self._error_for(response)

    @staticmethod
    def _error_for(response: requests.Response) -> RegistryClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = str(body.get("error") or response.reason or "Error desconocido")
        errors = body.get("errors") or {}
        status_code = response.status_code

        if status_code == 429:
            retry_after = response.headers.get("Retry-After")
            return TooManyRequests(
                message,
                status_code,
                errors,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        error_class = ERRORS_BY_STATUS.get(status_code)
        if error_class is None:
            error_class = ServiceUnavailable if status_code >= 500 else RegistryClientError
        return error_class(message, status_code, errors)

    def list(self) -> List[Dict]:
        return self._request("GET")

    def create(self, contenido: str) -> Dict:
        return self._request("POST", payload={"contenido": contenido})

    def update(self, registro_id: int, contenido: str) -> Dict:
        return self._request("PUT", f"/{registro_id}", payload={"contenido": contenido})

    def delete(self, registro_id: int) -> Dict:
        return self._request("DELETE", f"/{registro_id}")

    def delete_containing(self, palabra: str) -> Dict:
        return self._request("DELETE", "/limpiar-palabra", payload={"palabra": palabra})

    def delete_all(self) -> Dict:
        return self._request("DELETE", "/limpiar/todo")
