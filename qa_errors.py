class QuestionBoardError(Exception):
    """Base class for errors raised by the question store."""
    status_code = 500


class InvalidInput(QuestionBoardError, ValueError):
    status_code = 400


class NotFound(QuestionBoardError, KeyError):
    status_code = 404

    def __str__(self):
        # KeyError quotes its message
        return str(self.args[0]) if self.args else "Not found"


class StorageWriteFailure(QuestionBoardError, OSError):
    """The backend could not commit a replacement document."""
