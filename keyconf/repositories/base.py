"""
Error types shared by every configuration store.
"""


class StoreError(Exception):
    """Base for store failures with a machine-readable code."""
    def __init__(self, message: str, code: str = "store_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class StoreIOError(StoreError):
    """Directory/file creation, read or write failed."""
    def __init__(self, message: str, code: str = "store_io_error"):
        super().__init__(message, code)


class StoreParseError(StoreError):
    """File or template content is not a valid serialized mapping."""
    def __init__(self, message: str, code: str = "store_parse_error"):
        super().__init__(message, code)
