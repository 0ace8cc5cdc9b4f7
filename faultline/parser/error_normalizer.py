"""
Error Normalizer
================
Coerces whatever the caller reports into one canonical exception.

    BaseException instance → adopted as-is, classifiers = [type name]
    str                    → wrapped in MessageFault, classifiers = []

An exception that was never raised has no __traceback__; for those, and for
wrapped messages, the stack at normalization time is captured so the report
still points at the code that created it.
"""
import traceback
from dataclasses import dataclass
from typing import Optional, Union

from faultline.core.errors import ValidationError

Fault = Union[BaseException, str]


class MessageFault(Exception):
    """Synthetic exception carrying a plain report message."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


@dataclass(frozen=True)
class NormalizedFault:
    """Canonical fault consumed by the stack trace parser and payload assembler."""
    error: BaseException
    classifiers: tuple[str, ...]
    is_exception: bool
    captured_stack: Optional[traceback.StackSummary] = None

    @property
    def name(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        if isinstance(self.error, MessageFault):
            return self.error.message
        return str(self.error)


def is_exception_fault(fault: object) -> bool:
    return isinstance(fault, BaseException)


def _capture_stack() -> traceback.StackSummary:
    # Drop this helper and normalize_fault from the captured stack
    return traceback.StackSummary.from_list(traceback.extract_stack()[:-2])


def normalize_fault(fault: Fault) -> NormalizedFault:
    """
    Build the canonical fault for an exception or a plain message.

    Parameters
    ----------
    fault : BaseException | str
        The exception or message being reported.

    Returns
    -------
    NormalizedFault
        Canonical exception, its classifiers and, when the exception has no
        traceback of its own, the stack captured here.

    Raises
    ------
    ValidationError
        If fault is neither an exception nor a string.
    """
    if is_exception_fault(fault):
        captured = None if fault.__traceback__ is not None else _capture_stack()
        return NormalizedFault(
            error=fault,
            classifiers=(type(fault).__name__,),
            is_exception=True,
            captured_stack=captured,
        )

    if isinstance(fault, str):
        return NormalizedFault(
            error=MessageFault(fault),
            classifiers=(),
            is_exception=False,
            captured_stack=_capture_stack(),
        )

    raise ValidationError(
        f"Fault must be an exception or a message string, got {type(fault).__name__}"
    )


def describe_exception(error: BaseException) -> dict:
    """Serialize an exception for the 'Exception' annotation."""
    described = {
        "name": type(error).__name__,
        "message": str(error),
        "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
    }
    cause = error.__cause__ or error.__context__
    if cause is not None:
        described["cause"] = {"name": type(cause).__name__, "message": str(cause)}
    return described
