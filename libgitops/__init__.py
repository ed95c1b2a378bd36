"""File-backed raw object storage, directory watching and transaction results."""

__version__ = "0.1.0"