"""
Custom exception types for the Quark assembler.
"""


class AssemblerError(Exception):
    """Base exception for assembler errors."""

    def __init__(self, message: str, row_num: int = None, row_text: str = None):
        self.reason = message
        self.row_num = row_num
        self.row_text = row_text
        if row_num is not None:
            if row_text:
                message = f"Row {row_num}: {message}\n  {row_text}"
            else:
                message = f"Row {row_num}: {message}"
        super().__init__(message)

    def at_row(self, row_num: int, row_text: str = None) -> "AssemblerError":
        """Return a copy of this error attributed to a source row."""
        err = self.__class__.__new__(self.__class__)
        err.__dict__.update(self.__dict__)
        AssemblerError.__init__(err, self.reason, row_num, row_text)
        return err


class ParseError(AssemblerError):
    """Exception raised for row parsing errors."""

    pass


class MalformedRow(ParseError):
    """Row has the wrong shape for its opcode."""

    pass


class InvalidRegister(ParseError):
    """Register token is not one of R0..R7."""

    def __init__(self, token: str, row_num: int = None, row_text: str = None):
        self.token = token
        super().__init__(
            f"Invalid register: {token!r} (expected R0-R7)", row_num, row_text
        )


class UnsupportedOpcode(ParseError):
    """Mnemonic or opcode number is not part of the instruction set."""

    def __init__(self, opcode, row_num: int = None, row_text: str = None):
        self.opcode = opcode
        super().__init__(f"Unsupported opcode: {opcode!r}", row_num, row_text)


class EncodingError(AssemblerError):
    """Exception raised for instruction encoding errors."""

    pass


class OperandOutOfRange(EncodingError):
    """Operand value does not fit its bit field."""

    def __init__(
        self, field: str, value: int, width: int, row_num: int = None, row_text: str = None
    ):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(
            f"{field} value {value} out of range [0, {(1 << width) - 1}] for {width}-bit field",
            row_num,
            row_text,
        )


class DecodingError(AssemblerError):
    """Exception raised when a binary image cannot be decoded."""

    pass


class TruncatedRecord(DecodingError):
    """Binary image length is not a whole number of records."""

    def __init__(self, length: int, record_size: int = 5):
        self.length = length
        super().__init__(
            f"Image length {length} is not a multiple of {record_size} bytes"
        )
