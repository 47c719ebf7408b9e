import json
from io import StringIO
from unittest import mock

import requests
from django.core.cache import cache
from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, override_settings
from rest_framework.test import APILiveServerTestCase

from registros.app import AccessRestricted, RegistryApp, contains_injection_marker, validate_contenido
from registros.client import (
    InvalidRegistro,
    RegistroNotFound,
    RegistryClient,
    ServiceUnavailable,
    TooManyRequests,
)
from registros.models import Registro


def make_response(status_code, body=None, headers=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode() if body is not None else b""
    response.headers.update(headers or {})
    return response


def make_registros(count):
    return [
        {"id": count - i, "contenido": f"registro {count - i}", "createdAt": "2026-10-19T12:00:00Z"}
        for i in range(count)
    ]


class RegistryClientTests(SimpleTestCase):
    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.registry = RegistryClient("http://api.local/registros/", session=self.session)

    def test_builds_urls_and_payloads(self):
        self.session.request.return_value = make_response(201, {"id": 1, "contenido": "hola"})
        self.assertEqual(self.registry.create("hola"), {"id": 1, "contenido": "hola"})
        self.session.request.assert_called_with(
            "POST", "http://api.local/registros", json={"contenido": "hola"}, timeout=10
        )

        self.session.request.return_value = make_response(200, {"message": "ok", "count": 2})
        self.registry.delete_containing("x")
        self.session.request.assert_called_with(
            "DELETE",
            "http://api.local/registros/limpiar-palabra",
            json={"palabra": "x"},
            timeout=10,
        )

        self.registry.update(7, "nuevo")
        self.session.request.assert_called_with(
            "PUT", "http://api.local/registros/7", json={"contenido": "nuevo"}, timeout=10
        )

        self.registry.delete_all()
        self.session.request.assert_called_with(
            "DELETE", "http://api.local/registros/limpiar/todo", json=None, timeout=10
        )

    def test_validation_error_carries_field_messages(self):
        self.session.request.return_value = make_response(
            400,
            {"error": "Texto demasiado largo", "errors": {"contenido": ["Texto demasiado largo"]}},
        )
        with self.assertRaises(InvalidRegistro) as ctx:
            self.registry.create("x" * 101)
        self.assertEqual(ctx.exception.message, "Texto demasiado largo")
        self.assertEqual(ctx.exception.errors, {"contenido": ["Texto demasiado largo"]})
        self.assertEqual(ctx.exception.status_code, 400)

    def test_not_found(self):
        self.session.request.return_value = make_response(404, {"error": "Registro no encontrado."})
        with self.assertRaises(RegistroNotFound):
            self.registry.delete(3)

    def test_rate_limited(self):
        self.session.request.return_value = make_response(
            429, {"error": "Has enviado demasiadas propuestas."}, {"Retry-After": "120"}
        )
        with self.assertRaises(TooManyRequests) as ctx:
            self.registry.create("hola")
        self.assertEqual(ctx.exception.retry_after, 120)

    def test_server_error_without_json_body(self):
        self.session.request.return_value = make_response(502)
        with self.assertRaises(ServiceUnavailable) as ctx:
            self.registry.list()
        self.assertEqual(ctx.exception.status_code, 502)

    def test_connection_failure(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(ServiceUnavailable):
            self.registry.list()


class RegistryAppTests(SimpleTestCase):
    def setUp(self):
        self.registry = mock.Mock(spec=RegistryClient)
        self.registry.list.return_value = make_registros(45)
        self.app = RegistryApp(self.registry)
        self.app.load()

    def test_pages_locally(self):
        self.assertEqual(self.app.num_pages, 3)
        first = self.app.page(1)
        self.assertEqual(len(first.object_list), 20)
        self.assertEqual(first.object_list[0]["id"], 45)
        last = self.app.page(3)
        self.assertEqual([r["id"] for r in last.object_list], [5, 4, 3, 2, 1])
        self.assertFalse(last.has_next())

    def test_out_of_range_pages_clamp(self):
        self.assertEqual(self.app.page(99).number, 3)
        self.assertEqual(self.app.page("abc").number, 1)

    def test_empty_list_has_one_empty_page(self):
        self.registry.list.return_value = []
        self.app.refresh()
        self.assertEqual(self.app.num_pages, 1)
        self.assertEqual(list(self.app.page(1).object_list), [])

    def test_mutations_refetch_the_list(self):
        self.registry.list.reset_mock()
        self.app.add("nuevo")
        self.app.edit(1, "editado")
        self.app.remove(1)
        self.app.purge_word("x")
        self.app.purge_all(confirm=True)
        self.assertEqual(self.registry.list.call_count, 5)

    def test_client_validation_skips_the_round_trip(self):
        for text in ["", "   ", "x" * 101]:
            with self.assertRaises(InvalidRegistro):
                self.app.add(text)
            with self.assertRaises(InvalidRegistro):
                self.app.edit(1, text)
        self.registry.create.assert_not_called()
        self.registry.update.assert_not_called()

    def test_purge_all_needs_confirmation(self):
        with self.assertRaises(InvalidRegistro):
            self.app.purge_all()
        self.registry.delete_all.assert_not_called()

    def test_injection_marker_locks_the_app(self):
        with self.assertRaises(AccessRestricted):
            self.app.add("hola <SCRIPT>alert(1)</script>")
        self.assertTrue(self.app.locked)
        self.registry.create.assert_not_called()

        for call in [
            lambda: self.app.add("inofensivo"),
            lambda: self.app.remove(1),
            lambda: self.app.refresh(),
            lambda: self.app.page(1),
        ]:
            with self.assertRaises(AccessRestricted):
                call()

        # A fresh app is the only way back.
        self.assertFalse(RegistryApp(self.registry).locked)

    def test_marker_helpers(self):
        self.assertTrue(contains_injection_marker("<ScRiPt src=x>"))
        self.assertFalse(contains_injection_marker("script sin etiqueta"))
        self.assertEqual(validate_contenido(" a "), " a ")


# The live server's static-files handler needs a str STATIC_URL to route requests.
@override_settings(STATIC_URL="/static/")
class LiveRegistryTests(APILiveServerTestCase):
    def setUp(self):
        cache.clear()
        self.url = f"{self.live_server_url}/registros"
        self.app = RegistryApp(RegistryClient(self.url), page_size=2)

    def test_app_against_running_api(self):
        self.app.load()
        self.assertEqual(self.app.registros, [])

        for text in ["uno", "dos", "tres"]:
            self.app.add(text)
        self.assertEqual([r["contenido"] for r in self.app.registros], ["tres", "dos", "uno"])
        self.assertEqual(self.app.num_pages, 2)

        newest = self.app.registros[0]
        self.app.edit(newest["id"], "TRES")
        self.assertEqual(self.app.registros[0]["contenido"], "TRES")

        result = self.app.purge_word("d")
        self.assertEqual(result["count"], 1)
        self.assertEqual(len(self.app.registros), 2)

        self.app.remove(newest["id"])
        with self.assertRaises(RegistroNotFound):
            self.app.remove(newest["id"])

        self.app.purge_all(confirm=True)
        self.assertEqual(self.app.registros, [])
        self.assertFalse(Registro.objects.exists())

    def test_server_side_validation_surfaces(self):
        with self.assertRaises(InvalidRegistro) as ctx:
            self.app.client.create("   ")
        self.assertEqual(ctx.exception.message, "El campo no puede estar vacío")

    def test_command_line_front_end(self):
        out = StringIO()
        call_command("registros", "--url", self.url, "add", "desde la consola", stdout=out)
        self.assertIn("Creado #", out.getvalue())
        self.assertIn("desde la consola", out.getvalue())

        registro = Registro.objects.get()
        out = StringIO()
        call_command("registros", "--url", self.url, "edit", str(registro.pk), "editado", stdout=out)
        self.assertIn("editado", out.getvalue())

        out = StringIO()
        call_command("registros", "--url", self.url, "list", "--page", "5", stdout=out)
        self.assertIn("Página 1 de 1", out.getvalue())

        with self.assertRaises(CommandError):
            call_command("registros", "--url", self.url, "purge-all", stdout=StringIO())
        self.assertEqual(Registro.objects.count(), 1)

        out = StringIO()
        call_command("registros", "--url", self.url, "purge-all", "--yes", stdout=out)
        self.assertIn("No has escrito nada", out.getvalue())

    def test_command_reports_api_errors(self):
        with self.assertRaises(CommandError) as ctx:
            call_command("registros", "--url", self.url, "delete", "999", stdout=StringIO())
        self.assertIn("Registro no encontrado", str(ctx.exception))
