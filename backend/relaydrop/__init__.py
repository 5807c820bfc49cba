"""relaydrop - one-shot, ephemeral message relay."""

__version__ = "1.0.0"
