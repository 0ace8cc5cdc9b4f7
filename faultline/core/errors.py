"""
Errors
======
Exception hierarchy raised by the report builder.

    FaultlineError
    ├── ValidationError       — a setter received a value of the wrong shape
    └── ReportFinalizedError  — a setter was called after finalize()

Collection-time problems (unreadable source files, unsupported platforms,
missing pyproject.toml) are never raised; the affected piece is left empty.
"""


class FaultlineError(Exception):
    """Base class for all faultline errors."""


class ValidationError(FaultlineError, ValueError):
    """Raised synchronously by a setter; builder state is left unchanged."""


class ReportFinalizedError(FaultlineError):
    """Raised when a finalized report is mutated."""
