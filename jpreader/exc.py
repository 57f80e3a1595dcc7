class DoesNotExist(Exception):  # noqa: N818
    """Exception raised when a resource does not exist."""

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f'{resource_type} with ID "{resource_id!s}" does not exist')


class AlreadyExists(Exception):  # noqa: N818
    """Exception raised when a resource already exists."""

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f'{resource_type} with ID "{resource_id!s}" already exists')


class FileAlreadyImported(AlreadyExists):
    """Exception raised when a document with the same name was already imported."""

    def __init__(self, name: str):
        super().__init__("Document", name)


class TokenizationFailure(Exception):  # noqa: N818
    """Exception raised when the tokenizer fails on a line during import."""

    def __init__(self, text: str, error: Exception):
        self.text = text
        self.error = error
        super().__init__(f"Tokenization failed for {text!r}: {error!s}")


class StorageFailure(Exception):  # noqa: N818
    """
    Exception raised when the database fails inside a reader transaction.

    The transaction has been rolled back by the time this is raised.
    """

    def __init__(self, operation: str, error: Exception):
        self.operation = operation
        self.error = error
        super().__init__(f"Storage failure during {operation}: {error!s}")


class ReaderError(Exception):
    """
    Base class for the expected, recoverable reader conditions.

    Nothing has been changed when one of these is raised; the caller should
    redisplay the current view.
    """

    #: Human-readable message for the condition.
    message: str = "Reader error"

    def __init__(self) -> None:
        super().__init__(self.message)


class EofReached(ReaderError):  # noqa: N818
    """Raised by ``next`` when the reader is already at the end of the document."""

    message = "End of document reached"


class UndoEmpty(ReaderError):  # noqa: N818
    """Raised by ``undo`` when there is nothing to undo."""

    message = "Nothing to undo"


class RedoEmpty(ReaderError):  # noqa: N818
    """Raised by ``redo`` when there is nothing to redo."""

    message = "Nothing to redo"


class NoOpenFile(ReaderError):  # noqa: N818
    """Raised when a reader operation is called with no document open."""

    message = "No document is open"
