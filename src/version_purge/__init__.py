"""SharePoint document library version history purge."""

__version__ = "0.1.0"
