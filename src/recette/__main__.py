"""Allow ``python -m recette``."""

from .cli import app

app()
