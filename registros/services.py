import logging
from contextlib import contextmanager
from typing import List, Optional

from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from registros.content_filter import ContentFilter
from registros.exceptions import StoreUnavailable
from registros.models import Registro

logger = logging.getLogger(__name__)

# Largest value a BigAutoField primary key can hold.
MAX_REGISTRO_ID = 2**63 - 1


@contextmanager
def _store_errors(operation: str):
    """Turn persistence failures into StoreUnavailable."""
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"Store failure during {operation}: {exc}", exc_info=True)
        raise StoreUnavailable() from exc


def parse_registro_id(raw) -> int:
    """Validate a record id from the URL path: ASCII digits within BigAutoField range."""
    text = str(raw)
    pk = int(text) if text.isascii() and text.isdigit() else 0
    if not 1 <= pk <= MAX_REGISTRO_ID:
        raise ValidationError({"id": ["Identificador de registro inválido."]})
    return pk


def list_registros() -> List[Registro]:
    """All records, newest first. Pagination is left to the client."""
    with _store_errors("list"):
        return list(Registro.objects.order_by("-created_at", "-id"))


def create_registro(contenido: str, content_filter: Optional[ContentFilter] = None) -> Registro:
    """
    Persist a validated record after running it through the content filter.

    Args:
        contenido: Validated text (non-blank, at most 100 characters)
        content_filter: Filter to apply; defaults to the configured denylist

    Returns:
        The stored record with its assigned id and creation timestamp
    """
    content_filter = content_filter or ContentFilter.from_settings()
    filtered = content_filter.apply(contenido)
    if filtered != contenido:
        logger.info("Content filter masked denylisted words on create")

    with _store_errors("create"):
        registro = Registro.objects.create(contenido=filtered)

    logger.info(f"Created registro #{registro.pk}")
    return registro


def update_registro(
    pk: int, contenido: str, content_filter: Optional[ContentFilter] = None
) -> Registro:
    """
    Replace the content of an existing record.

    A single UPDATE statement is issued, so a record deleted concurrently is
    never brought back. There is no version check: concurrent updates of the
    same record resolve to whichever write lands last.

    Raises:
        Registro.DoesNotExist: If no record has that id
    """
    content_filter = content_filter or ContentFilter.from_settings()
    filtered = content_filter.apply(contenido)
    if filtered != contenido:
        logger.info(f"Content filter masked denylisted words on update of #{pk}")

    with _store_errors("update"):
        updated = Registro.objects.filter(pk=pk).update(contenido=filtered)
        if not updated:
            raise Registro.DoesNotExist(f"Registro {pk} does not exist")
        registro = Registro.objects.get(pk=pk)

    logger.info(f"Updated registro #{pk}")
    return registro


def delete_registro(pk: int) -> bool:
    """
    Delete one record by id.

    Returns:
        True if deleted, False if no record had that id
    """
    with _store_errors("delete"):
        deleted, _ = Registro.objects.filter(pk=pk).delete()

    if deleted:
        logger.info(f"Deleted registro #{pk}")
    return bool(deleted)


def delete_containing(palabra: str) -> int:
    """
    Delete every record whose content contains ``palabra`` (case-sensitive).

    ``contains`` is case-insensitive on SQLite and on most MySQL collations,
    so candidates are re-checked in Python before deletion.

    Returns:
        Number of records deleted
    """
    if not palabra:
        raise ValidationError({"palabra": ["Debes especificar una palabra para eliminar."]})

    with _store_errors("delete by substring"):
        with transaction.atomic():
            candidates = Registro.objects.filter(contenido__contains=palabra).values_list(
                "id", "contenido"
            )
            ids = [pk for pk, contenido in candidates if palabra in contenido]
            deleted, _ = Registro.objects.filter(pk__in=ids).delete()

    logger.info(f"Deleted {deleted} registros containing {palabra!r}")
    return deleted


def delete_all() -> int:
    """Delete every record. Irreversible; confirmation is up to the caller."""
    with _store_errors("delete all"):
        deleted, _ = Registro.objects.all().delete()

    logger.warning(f"Deleted all registros ({deleted})")
    return deleted
