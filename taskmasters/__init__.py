"""TaskMasters productivity client, chat and friend graph."""

__version__ = "1.0.0"
