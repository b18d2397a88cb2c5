from enum import Enum


class ErrorKind(str, Enum):
    ILLEGAL_RECORD = "IllegalRecord"
    ILLEGAL_ADDRESS = "IllegalAddress"
    ILLEGAL_HOSTNAME = "IllegalHostname"


class IllegalRecord(ValueError):
    """Raised when a non-empty input line has no field delimiters."""

    kind = ErrorKind.ILLEGAL_RECORD

    def __init__(self, line):
        super().__init__(f"Illegal record, no fields found in '{line}'")
        self.line = line
