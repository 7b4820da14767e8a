"""Client library for a channel-based configuration store, with an in-memory store."""

__version__ = "0.1.0"
__all__ = ["values", "store", "channel", "arrays", "structs"]