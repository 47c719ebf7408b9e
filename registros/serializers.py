from rest_framework import serializers

from registros.models import MAX_CONTENIDO_LENGTH, Registro


class StrictCharField(serializers.CharField):
    """CharField that refuses numbers and other non-string JSON values."""

    default_error_messages = {
        "not_a_string": "Debe ser una cadena de texto.",
    }

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("not_a_string")
        return super().to_internal_value(data)


class RegistroSerializer(serializers.ModelSerializer):
    """Wire representation of a stored record."""

    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Registro
        fields = ["id", "contenido", "createdAt"]
        read_only_fields = ["id", "contenido"]


class RegistroWriteSerializer(serializers.Serializer):
    """Body accepted by create and update: exactly one ``contenido`` string."""

    contenido = StrictCharField(
        max_length=MAX_CONTENIDO_LENGTH,
        trim_whitespace=False,
        error_messages={
            "required": "Este campo es requerido.",
            "null": "Debe ser una cadena de texto.",
            "blank": "El campo no puede estar vacío",
            "max_length": "Texto demasiado largo",
        },
        help_text="Text of the record: at most 100 characters, not blank.",
    )

    def validate_contenido(self, value):
        # Length is checked on the raw value; emptiness on the trimmed one.
        if not value.strip():
            raise serializers.ValidationError("El campo no puede estar vacío")
        return value

    def validate(self, attrs):
        unknown = sorted(set(self.initial_data) - set(self.fields))
        if unknown:
            raise serializers.ValidationError({key: ["Campo no permitido."] for key in unknown})
        return attrs


class PalabraSerializer(serializers.Serializer):
    """Body accepted by the delete-by-substring operation."""

    palabra = StrictCharField(
        trim_whitespace=False,
        error_messages={
            "required": "Debes especificar una palabra para eliminar.",
            "null": "Debes especificar una palabra para eliminar.",
            "blank": "Debes especificar una palabra para eliminar.",
        },
        help_text="Case-sensitive substring; every record containing it is deleted.",
    )


class MessageSerializer(serializers.Serializer):
    message = serializers.CharField(help_text="Human-readable confirmation")


class PurgeResultSerializer(serializers.Serializer):
    message = serializers.CharField(help_text="Human-readable confirmation")
    count = serializers.IntegerField(help_text="Number of records deleted")


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField(help_text="What went wrong")
    errors = serializers.DictField(
        child=serializers.ListField(child=serializers.CharField()),
        required=False,
        help_text="Field-level validation messages",
    )
