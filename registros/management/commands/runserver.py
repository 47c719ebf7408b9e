from django.conf import settings
from django.core.management.commands.runserver import Command as RunserverCommand


class Command(RunserverCommand):
    help = "Starts the registry API development server on PORT (default 3001)."

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.default_port = str(getattr(settings, "PORT", 3001))
