"""Recette: test record authoring and print rendering."""

__version__ = "0.1.0"
