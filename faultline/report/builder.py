"""
Report Builder
==============
Public entry point: a mutable builder that turns an exception or message
into a frozen Payload.

Lifecycle:
    OPEN       — setters may be called any number of times, in any order
    FINALIZED  — after the first finalize(); setters raise ReportFinalizedError

finalize() pipeline (fixed order):
    1. Snapshot caller attributes / annotations / fault
    2. Parse the stack trace (source excerpts, optional symbolication ids)
    3. Resolve the calling module, unless the caller set 'application'
    4. Merge attributes, then annotations, into the payload

Caveat: finalize() is NOT idempotent. Each call re-parses the stack trace,
re-reads telemetry and re-resolves the calling module, so two payloads from
the same builder share uuid / timestamp / classifiers but may differ in
telemetry values.
"""
import asyncio
import copy
import enum
import logging
import time
from collections.abc import Sequence
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from faultline.core.config import DEFAULT_CONTEXT_LINE_COUNT, DEFAULT_TAB_WIDTH
from faultline.core.constants import APPLICATION_ATTRIBUTE
from faultline.core.errors import ReportFinalizedError, ValidationError
from faultline.models.payload import Payload
from faultline.models.stack_trace import StackTrace, SymbolicationMapEntry
from faultline.parser.classification import (
    classify_attributes,
    validate_annotation,
    validate_attribute,
)
from faultline.parser.error_normalizer import Fault, normalize_fault
from faultline.parser.stack_trace_parser import StackTraceParser
from faultline.services.module_resolver import read_module
from faultline.services.payload_assembler import PayloadAssembler, ReportIdentity
from faultline.services.symbolication import SymbolicationResolver
from faultline.utils.identifiers import generate_report_uuid

logger = logging.getLogger(__name__)


class BuilderState(str, enum.Enum):
    OPEN = "open"
    FINALIZED = "finalized"


def _validate_symbolication_map(entries: Any) -> list[SymbolicationMapEntry]:
    if entries is None:
        raise ValidationError("Symbolication map is undefined")
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise ValidationError("Invalid type of symbolication map")
    validated: list[SymbolicationMapEntry] = []
    for entry in entries:
        if isinstance(entry, SymbolicationMapEntry):
            validated.append(entry)
            continue
        try:
            validated.append(SymbolicationMapEntry.model_validate(entry))
        except PydanticValidationError as e:
            raise ValidationError(
                "Symbolication map contains invalid values - missing file or uuid value"
            ) from e
    return validated


class ReportBuilder:
    """
    Collects everything known about a fault and produces its Payload.

    Usage:
        builder = ReportBuilder(err, {"user.id": "42", "request": {"path": "/"}})
        builder.add_attribute("release", "1.4.2")
        payload = await builder.finalize()
    """

    def __init__(
        self,
        fault: Fault = "",
        client_attributes: Optional[Mapping[str, Any]] = None,
        attachments: Optional[list[str]] = None,
    ) -> None:
        self.uuid = generate_report_uuid()
        self.timestamp = int(time.time())
        self.identity = ReportIdentity(uuid=self.uuid, timestamp=self.timestamp)

        self.state = BuilderState.OPEN
        self.stack_trace: Optional[StackTrace] = None
        self.tab_width = DEFAULT_TAB_WIDTH
        self.context_line_count = DEFAULT_CONTEXT_LINE_COUNT

        self._attachments = list(attachments or [])
        self._symbolication = False
        self._symbolication_map: Optional[list[SymbolicationMapEntry]] = None
        self._assembler = PayloadAssembler()

        split = classify_attributes(client_attributes)
        self._attributes: dict[str, Any] = dict(split.attributes)
        self._annotations: dict[str, Any] = dict(split.annotations)

        self._fault = fault
        self._normalized = normalize_fault(fault)

    # -----------------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------------
    @property
    def classifiers(self) -> list[str]:
        return list(self._normalized.classifiers)

    @property
    def attributes(self) -> dict[str, Any]:
        """Caller attributes set so far (built-ins are merged at finalize)."""
        return dict(self._attributes)

    @property
    def annotations(self) -> dict[str, Any]:
        return dict(self._annotations)

    def is_fault_report(self) -> bool:
        """True if the current fault is an exception rather than a message."""
        return self._normalized.is_exception

    def get_fault(self) -> Fault:
        return self._fault

    def get_attachments(self) -> list[str]:
        return list(self._attachments)

    # -----------------------------------------------------------------------
    # Setters (OPEN state only)
    # -----------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self.state is BuilderState.FINALIZED:
            raise ReportFinalizedError(f"Report {self.uuid} is finalized and can no longer change")

    def set_fault(self, fault: Fault) -> None:
        self._ensure_open()
        normalized = normalize_fault(fault)
        self._fault = fault
        self._normalized = normalized

    def add_attribute(self, key: str, value: Any) -> None:
        self._ensure_open()
        validate_attribute(key, value)
        self._attributes[key] = value

    def add_annotation(self, key: str, value: Any) -> None:
        self._ensure_open()
        self._annotations[key] = validate_annotation(key, value)

    def add_object_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Classify a metadata mapping and merge it into the caller sets."""
        self._ensure_open()
        split = classify_attributes(attributes)
        self._attributes.update(split.attributes)
        self._annotations.update(split.annotations)

    def set_symbolication(self, flag: bool) -> None:
        self._ensure_open()
        self._symbolication = bool(flag)

    def set_symbolication_map(self, entries: Sequence[Any]) -> None:
        """
        Attach an explicit symbol map.

        Raises
        ------
        ValidationError
            If entries is None, not a sequence, or any entry lacks file/uuid.
            The previously stored map is kept.
        """
        self._ensure_open()
        self._symbolication_map = _validate_symbolication_map(entries)

    def set_source_code_options(self, tab_width: int, context_line_count: int) -> None:
        self._ensure_open()
        for name, value in (("tab_width", tab_width), ("context_line_count", context_line_count)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValidationError(f"{name} must be a positive integer, got {value!r}")
        self.tab_width = tab_width
        self.context_line_count = context_line_count

    # -----------------------------------------------------------------------
    # Finalize
    # -----------------------------------------------------------------------
    async def finalize(self) -> Payload:
        """
        Collect the stack trace and telemetry and assemble the payload.

        Returns
        -------
        Payload
            Frozen snapshot, independent of later builder changes.
        """
        fault = self._normalized
        client_attributes = dict(self._attributes)
        client_annotations = copy.deepcopy(self._annotations)
        symbolication = SymbolicationResolver(
            self._symbolication, self._symbolication_map, client_attributes
        )

        parser = StackTraceParser(self.tab_width, self.context_line_count)
        stack_trace = await parser.parse(fault, symbolication.include_in_parse())
        self.stack_trace = stack_trace

        module = None
        if APPLICATION_ATTRIBUTE not in client_attributes:
            module, resolved_path = await asyncio.to_thread(
                read_module, stack_trace.calling_module_path
            )
            if module is None:
                logger.debug("Calling module unresolved (%s)", resolved_path or "no frames")

        payload = await self._assembler.assemble(
            identity=self.identity,
            fault=fault,
            stack_trace=stack_trace,
            client_attributes=client_attributes,
            client_annotations=client_annotations,
            symbolication=symbolication,
            module=module,
        )
        self.state = BuilderState.FINALIZED
        logger.info("Finalized report %s (%d frames)", self.uuid, len(stack_trace.frames))
        return payload
