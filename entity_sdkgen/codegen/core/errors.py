"""
Exception hierarchy for client SDK generation.

Every failure that aborts a generation run derives from ``GeneratorError``.
"""


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class SchemaUnavailableError(GeneratorError):
    """The entity schema could not be read or holds nothing to generate."""

    pass


class SchemaError(SchemaUnavailableError):
    """The schema document or registry input is malformed."""

    pass


class UnsupportedTypeError(GeneratorError):
    """A data type has no backend mapping and no fallback is allowed."""

    def __init__(self, message: str, type_name: str = "", context: str = ""):
        super().__init__(message)
        self.type_name = type_name
        self.context = context


class PlaceholderMismatchError(GeneratorError):
    """A placeholder token was missing, duplicated or left unsubstituted."""

    def __init__(self, message: str, token: str = "", occurrences: int = 0):
        super().__init__(message)
        self.token = token
        self.occurrences = occurrences


class OutputWriteError(GeneratorError):
    """Creating, writing or replacing an output file failed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
