class NerNedEvalError(Exception):
    """Base class for evaluator errors."""


class RecordFormatError(NerNedEvalError, ValueError):
    """An input line cannot be read as a sentence record."""


class SpanOrderError(NerNedEvalError, ValueError):
    """Spans are not sorted by start or overlap each other."""


class OutputDirectoryError(NerNedEvalError, OSError):
    """The result directory cannot be created."""
