"""upld: a content-addressed command line pastebin."""

__version__ = "0.1.0"
