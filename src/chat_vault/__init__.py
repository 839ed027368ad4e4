"""Chat Vault: store, list and share binary chat exports over a REST API."""

__version__ = "1.0.0"
