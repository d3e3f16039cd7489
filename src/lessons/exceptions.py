"""
Custom exceptions for the lesson migration engine.

Structural problems and fidelity warnings are never raised: the validator
records them in a ValidationReport. Only transformation can raise, and the
batch orchestrator catches those per record.
"""


class LessonMigrationError(Exception):
    """Base exception for migration errors"""
    pass


class TransformationError(LessonMigrationError):
    """Raised when a record cannot be transformed into a canonical lesson"""
    pass


class MalformedLessonError(TransformationError):
    """Raised when a field is present but does not have the expected shape"""

    def __init__(self, field: str, expected: str, actual: object):
        self.field = field
        self.expected = expected
        self.actual_type = type(actual).__name__
        super().__init__(f"'{field}' must be {expected}, got {self.actual_type}")


class UnsupportedFormatError(LessonMigrationError):
    """Raised when no transformer is registered for a format tag"""
    pass
