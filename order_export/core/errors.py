"""
Exception taxonomy for the order export pipeline.

Every failure that aborts a run is a PipelineError. The driver attaches the
name of the failing stage ("config", "load", a transform stage, "write")
before handing the error to completion.finalize.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline failures."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage


class ConfigError(PipelineError):
    """Raised for a missing or invalid pipeline configuration."""


class CsvIOError(PipelineError):
    """Raised when the input cannot be read or the output cannot be written."""


class CsvFormatError(PipelineError):
    """Raised for malformed CSV structure (header or field-count mismatch)."""


class FieldMissingError(PipelineError):
    """Raised when a record lacks a field a stage requires."""


class FieldTypeError(PipelineError, TypeError):
    """Raised when a required field holds a non-string value."""
