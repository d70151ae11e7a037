# ==============================================================================
# app/calculator/errors.py
# ------------------------------------------------------------------------------
# Typed errors raised by the parsing and calculation pipeline.
# Each error names the file or sheet that caused it when that is known, so the
# caller can show the message verbatim and ask for a corrected upload.
# ==============================================================================


class CalculatorError(Exception):
    """Base class for every error the pipeline raises on purpose."""

    kind = 'calculator_error'

    def __init__(self, message, source=None):
        self.message = message
        self.source = source
        super().__init__(self.__str__())

    def __str__(self):
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class IngestError(CalculatorError):
    """The file could not be read or decoded as a table."""
    kind = 'ingest_error'


# Decode failures are also known by the ParseError name.
ParseError = IngestError


class SchemaError(CalculatorError):
    """The expected header row or columns were not found."""
    kind = 'schema_error'


class NoDataError(CalculatorError):
    """A sheet was readable but held no usable rows."""
    kind = 'no_data'


class PeriodMismatchError(CalculatorError):
    """Two sheets that must describe the same month do not."""
    kind = 'period_mismatch'


class ValidationError(CalculatorError):
    """User supplied values or a derived roster failed validation."""
    kind = 'validation_error'

    def __init__(self, message, errors=None, source=None):
        self.errors = list(errors or [])
        super().__init__(message, source=source)

    def __str__(self):
        text = super().__str__()
        if self.errors:
            return f"{text}: {', '.join(self.errors)}"
        return text


class NoOverlapError(CalculatorError):
    """Sales and attendance sheets share no date."""
    kind = 'no_overlap'
