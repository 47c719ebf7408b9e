"""
Stateful client application for the registry.

Keeps the full record list in memory, refetching it on load and after every
successful change, and pages through it locally. Input is checked before any
request is sent: the same emptiness and length rules the server applies, plus
a scan for an HTML injection marker. Finding the marker locks the app; a
locked app refuses everything until a new one is created. The lock is a
deterrent only, the server does not rely on it.
"""

import logging
from typing import Dict, List

from django.core.paginator import Page, Paginator

from registros.client import InvalidRegistro, RegistryClient, RegistryClientError
from registros.models import MAX_CONTENIDO_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
INJECTION_MARKER = "<script"
EMPTY_MESSAGE = "El campo no puede estar vacío"
TOO_LONG_MESSAGE = "Texto demasiado largo"
LOCKED_MESSAGE = "Acceso restringido. Recarga la aplicación para continuar."


class AccessRestricted(RegistryClientError):
    """The app is locked after suspicious input."""


def contains_injection_marker(text: str) -> bool:
    return INJECTION_MARKER in text.lower()


def validate_contenido(contenido: str) -> str:
    """Client-side copy of the server's content rules; saves a round trip."""
    if not isinstance(contenido, str) or not contenido.strip():
        raise InvalidRegistro(EMPTY_MESSAGE, errors={"contenido": [EMPTY_MESSAGE]})
    if len(contenido) > MAX_CONTENIDO_LENGTH:
        raise InvalidRegistro(TOO_LONG_MESSAGE, errors={"contenido": [TOO_LONG_MESSAGE]})
    return contenido


class RegistryApp:
    def __init__(self, client: RegistryClient, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.page_size = page_size
        self.registros: List[Dict] = []
        self.locked = False

    def _ensure_unlocked(self) -> None:
        if self.locked:
            raise AccessRestricted(LOCKED_MESSAGE)

    def _screen(self, text: str) -> None:
        self._ensure_unlocked()
        if isinstance(text, str) and contains_injection_marker(text):
            self.locked = True
            logger.warning("Injection marker found in input; locking the application")
            raise AccessRestricted(LOCKED_MESSAGE)

    def refresh(self) -> List[Dict]:
        self._ensure_unlocked()
        self.registros = self.client.list()
        return self.registros

    load = refresh

    def add(self, contenido: str) -> Dict:
        self._screen(contenido)
        validate_contenido(contenido)
        created = self.client.create(contenido)
        self.refresh()
        return created

    def edit(self, registro_id: int, contenido: str) -> Dict:
        self._screen(contenido)
        validate_contenido(contenido)
        updated = self.client.update(registro_id, contenido)
        self.refresh()
        return updated

    def remove(self, registro_id: int) -> Dict:
        self._ensure_unlocked()
        result = self.client.delete(registro_id)
        self.refresh()
        return result

    def purge_word(self, palabra: str) -> Dict:
        self._screen(palabra)
        if not palabra:
            raise InvalidRegistro("Debes especificar una palabra para eliminar.")
        result = self.client.delete_containing(palabra)
        self.refresh()
        return result

    def purge_all(self, confirm: bool = False) -> Dict:
        self._ensure_unlocked()
        if not confirm:
            raise InvalidRegistro("Confirma que quieres eliminar todos los registros.")
        result = self.client.delete_all()
        self.refresh()
        return result

    def page(self, number=1) -> Page:
        """Page ``number`` of the loaded records; out-of-range numbers clamp."""
        self._ensure_unlocked()
        return Paginator(self.registros, self.page_size).get_page(number)

    @property
    def num_pages(self) -> int:
        return Paginator(self.registros, self.page_size).num_pages
