from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from registros.exceptions import RateLimitExceeded
from registros.models import Registro
from registros.ratelimit import RegistroCreateThrottle
from registros.serializers import (
    ErrorSerializer,
    MessageSerializer,
    PalabraSerializer,
    PurgeResultSerializer,
    RegistroSerializer,
    RegistroWriteSerializer,
)
from registros.services import (
    create_registro,
    delete_all,
    delete_containing,
    delete_registro,
    list_registros,
    parse_registro_id,
    update_registro,
)

NOT_FOUND_MESSAGE = "Registro no encontrado."

ID_PARAMETER = OpenApiParameter(
    name="pk",
    type=int,
    location=OpenApiParameter.PATH,
    description="Id of the record",
)


class RegistroCollectionView(APIView):
    """List every record or create a new one."""

    def get_throttles(self):
        # Only creation is metered.
        if self.request.method == "POST":
            return [RegistroCreateThrottle()]
        return []

    def throttled(self, request, wait):
        raise RateLimitExceeded(wait=wait)

    @extend_schema(
        operation_id="list_registros",
        summary="List records",
        description="Return every record, newest first. Pagination is done by the client.",
        responses={
            200: OpenApiResponse(
                response=RegistroSerializer(many=True),
                description="All stored records ordered by creation time, newest first",
            ),
            500: OpenApiResponse(response=ErrorSerializer, description="Store unavailable"),
        },
        tags=["Registros"],
    )
    def get(self, request):
        registros = list_registros()
        return Response(RegistroSerializer(registros, many=True).data)

    @extend_schema(
        operation_id="create_registro",
        summary="Create a record",
        description=(
            "Store a new record. The text must be 1-100 characters and not blank; "
            "denylisted words are masked before storage. Limited to 30 requests per "
            "client every 15 minutes."
        ),
        request=RegistroWriteSerializer,
        responses={
            201: OpenApiResponse(response=RegistroSerializer, description="Record created"),
            400: OpenApiResponse(response=ErrorSerializer, description="Invalid content"),
            429: OpenApiResponse(response=ErrorSerializer, description="Too many requests"),
        },
        tags=["Registros"],
    )
    def post(self, request):
        serializer = RegistroWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registro = create_registro(serializer.validated_data["contenido"])
        return Response(RegistroSerializer(registro).data, status=status.HTTP_201_CREATED)


class RegistroDetailView(APIView):
    """Edit or delete a single record."""

    @extend_schema(
        operation_id="update_registro",
        summary="Update a record",
        description="Replace the text of a record. Same rules as creation; the creation time is kept.",
        parameters=[ID_PARAMETER],
        request=RegistroWriteSerializer,
        responses={
            200: OpenApiResponse(response=RegistroSerializer, description="Record updated"),
            400: OpenApiResponse(response=ErrorSerializer, description="Invalid id or content"),
            404: OpenApiResponse(response=ErrorSerializer, description="Record not found"),
        },
        tags=["Registros"],
    )
    def put(self, request, pk):
        registro_id = parse_registro_id(pk)
        serializer = RegistroWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            registro = update_registro(registro_id, serializer.validated_data["contenido"])
        except Registro.DoesNotExist as exc:
            raise NotFound(NOT_FOUND_MESSAGE) from exc
        return Response(RegistroSerializer(registro).data)

    @extend_schema(
        operation_id="delete_registro",
        summary="Delete a record",
        description="Permanently remove a record. Deleting an id that does not exist is an error.",
        parameters=[ID_PARAMETER],
        responses={
            200: OpenApiResponse(response=MessageSerializer, description="Record deleted"),
            400: OpenApiResponse(response=ErrorSerializer, description="Invalid id"),
            404: OpenApiResponse(response=ErrorSerializer, description="Record not found"),
        },
        tags=["Registros"],
    )
    def delete(self, request, pk):
        registro_id = parse_registro_id(pk)
        if not delete_registro(registro_id):
            raise NotFound(NOT_FOUND_MESSAGE)
        return Response({"message": "Eliminado correctamente"})


class PurgeByWordView(APIView):
    """Delete every record containing a word."""

    @extend_schema(
        operation_id="delete_registros_containing",
        summary="Delete records containing a substring",
        description="Remove every record whose text contains `palabra` (case-sensitive).",
        request=PalabraSerializer,
        responses={
            200: OpenApiResponse(response=PurgeResultSerializer, description="Records deleted"),
            400: OpenApiResponse(response=ErrorSerializer, description="Missing `palabra`"),
        },
        tags=["Limpieza"],
    )
    def delete(self, request):
        serializer = PalabraSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        palabra = serializer.validated_data["palabra"]

        count = delete_containing(palabra)
        return Response(
            {
                "message": (
                    f"¡Limpieza exitosa! Se eliminaron {count} registros "
                    f'que contenían "{palabra}".'
                ),
                "count": count,
            }
        )


class PurgeAllView(APIView):
    """Delete every record."""

    @extend_schema(
        operation_id="delete_all_registros",
        summary="Delete all records",
        description="Irreversibly remove every record. No confirmation is enforced by the server.",
        request=None,
        responses={
            200: OpenApiResponse(response=PurgeResultSerializer, description="All records deleted"),
        },
        tags=["Limpieza"],
    )
    def delete(self, request):
        count = delete_all()
        return Response(
            {"message": f"Se eliminaron todos los registros ({count}).", "count": count}
        )
