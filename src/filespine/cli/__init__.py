"""Command-line interface (``filespine``)."""
