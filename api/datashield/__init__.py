"""DataShield: URL and email risk analysis relay."""

__version__ = "1.0.0"
