class ReportError(Exception):
    """Base class for errors raised by the report engine.

    ``user_message`` is the text shown to the user (banner or alert).
    """

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class InvalidDateRange(ReportError, ValueError):
    pass


class ReportFetchError(ReportError):
    """The upstream answered with something that is not a report envelope."""


class ExportPreconditionError(ReportError):
    """An export was requested before a report was loaded."""


class ExportEnvironmentError(ReportError):
    """The export capability itself is unavailable (PDF library, print window)."""
