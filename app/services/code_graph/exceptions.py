"""Исключения анализатора."""

from .models import ErrorType, ParseError


class CodeGraphError(Exception):
    """Базовая ошибка анализа исходника."""

    error_type: ErrorType = "analysis"

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def to_parse_error(self) -> ParseError:
        return ParseError(
            type=self.error_type, message=self.message, line=self.line, column=self.column
        )


class SourceValidationError(CodeGraphError):
    """Исходник пустой или слишком большой."""

    error_type: ErrorType = "validation"


class SourceSyntaxError(CodeGraphError):
    """Исходник не разобрался ни одной грамматикой."""

    error_type: ErrorType = "syntax"
