class DocumentError(Exception):
    """A document container could not be opened or read."""
