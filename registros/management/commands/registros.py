"""
Command-line front end for the registry API.

    manage.py registros list [--page N]
    manage.py registros add TEXT
    manage.py registros edit ID TEXT
    manage.py registros delete ID
    manage.py registros purge-word WORD
    manage.py registros purge-all --yes
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from registros.app import RegistryApp
from registros.client import RegistryClient, RegistryClientError


class Command(BaseCommand):
    help = "Browse and edit records through the registry API."

    def add_arguments(self, parser):
        parser.add_argument("--url", help="Base URL of the /registros endpoint")
        parser.add_argument("--page-size", type=int, default=settings.REGISTRY_PAGE_SIZE)

        actions = parser.add_subparsers(dest="action", required=True)

        listing = actions.add_parser("list", help="Show one page of records")
        listing.add_argument("--page", type=int, default=1)

        add = actions.add_parser("add", help="Create a record")
        add.add_argument("contenido")

        edit = actions.add_parser("edit", help="Replace the text of a record")
        edit.add_argument("id", type=int)
        edit.add_argument("contenido")

        delete = actions.add_parser("delete", help="Delete a record")
        delete.add_argument("id", type=int)

        purge_word = actions.add_parser("purge-word", help="Delete records containing a word")
        purge_word.add_argument("palabra")

        purge_all = actions.add_parser("purge-all", help="Delete every record")
        purge_all.add_argument("--yes", action="store_true", help="Confirm the deletion")

    def handle(self, *args, **options):
        client = RegistryClient(options["url"] or settings.REGISTRY_API_URL)
        app = RegistryApp(client, page_size=options["page_size"])
        action = options["action"]

        try:
            if action == "list":
                app.load()
            else:
                # Every action refetches the list once it succeeds.
                self._run_action(app, action, options)
        except RegistryClientError as e:
            raise CommandError(e.message) from e

        page_number = options.get("page", 1) if action == "list" else 1
        self._print_page(app, page_number)

    def _run_action(self, app, action, options):
        if action == "add":
            registro = app.add(options["contenido"])
            self.stdout.write(self.style.SUCCESS(f"Creado #{registro['id']}"))
        elif action == "edit":
            registro = app.edit(options["id"], options["contenido"])
            self.stdout.write(self.style.SUCCESS(f"Actualizado #{registro['id']}"))
        elif action == "delete":
            result = app.remove(options["id"])
            self.stdout.write(self.style.SUCCESS(result["message"]))
        elif action == "purge-word":
            result = app.purge_word(options["palabra"])
            self.stdout.write(self.style.SUCCESS(result["message"]))
        elif action == "purge-all":
            result = app.purge_all(confirm=options["yes"])
            self.stdout.write(self.style.SUCCESS(result["message"]))

    def _print_page(self, app, number):
        page = app.page(number)
        if not page.object_list:
            self.stdout.write("No has escrito nada")
            return
        for registro in page.object_list:
            self.stdout.write(f"#{registro['id']:<6} {registro['createdAt']}  {registro['contenido']}")
        self.stdout.write(f"Página {page.number} de {page.paginator.num_pages}")
