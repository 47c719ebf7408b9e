from django.db import models

MAX_CONTENIDO_LENGTH = 100


class Registro(models.Model):
    """A short text record submitted by a user."""

    contenido = models.CharField(max_length=MAX_CONTENIDO_LENGTH)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        # Newest first; ids break ties between records created in the same tick.
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"#{self.pk}: {self.contenido[:50]}"
