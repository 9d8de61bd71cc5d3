"""Backend for the Moradabad Ujala regional news site."""

__version__ = "0.1.0"
