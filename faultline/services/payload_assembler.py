"""
Payload Assembler
=================
Merges built-in telemetry with caller data into the frozen Payload.

Attribute precedence (later wins):
    1. memory information
    2. process status
    3. system attributes
    4. calling-module attributes (name, version, main, description, author)
    5. error.message
    6. caller attributes

Annotation precedence (later wins):
    1. Environment Variables
    2. Exec Arguments
    3. Exception (exception faults only)
    4. caller annotations

Caller values are deep-copied so the payload never shares state with the builder.
Telemetry reads touch /proc, psutil and the machine id files, so they run in a
worker thread.
"""
import asyncio
import copy
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from faultline.core.constants import (
    AGENT_NAME,
    AGENT_VERSION,
    ENVIRONMENT_ANNOTATION,
    ERROR_MESSAGE_ATTRIBUTE,
    EXCEPTION_ANNOTATION,
    EXEC_ARGUMENTS_ANNOTATION,
    LANG,
    LANG_VERSION,
    MAIN_THREAD,
)
from faultline.models.module_descriptor import ModuleDescriptor
from faultline.models.payload import Payload
from faultline.models.stack_trace import StackTrace
from faultline.parser.error_normalizer import NormalizedFault, describe_exception
from faultline.services.symbolication import SymbolicationResolver
from faultline.services.telemetry import (
    read_memory_information,
    read_process_status,
    read_system_attributes,
)

logger = logging.getLogger(__name__)


def interpreter_options(orig_argv: list[str], argv: list[str]) -> list[str]:
    """
    Return the options given to the interpreter itself.

    orig_argv is the full command line (sys.orig_argv); argv is what the
    program sees (sys.argv). Everything between the executable and the
    program's own arguments is an interpreter option, except a trailing -m / -c
    whose operand was consumed into argv.
    """
    end = len(orig_argv) - len(argv)
    if end <= 1:
        return []
    options = list(orig_argv[1:end])
    if options and options[-1] in ("-m", "-c"):
        options.pop()
    return options


@dataclass(frozen=True)
class ReportIdentity:
    """The parts of a report that never change after construction."""
    uuid: str
    timestamp: int
    lang: str = LANG
    lang_version: str = LANG_VERSION
    agent: str = AGENT_NAME
    agent_version: str = AGENT_VERSION
    main_thread: str = MAIN_THREAD


class PayloadAssembler:
    """
    Builds Payload objects from a parsed stack trace and builder state.

    Usage:
        assembler = PayloadAssembler()
        payload = await assembler.assemble(identity, fault, stack_trace, ...)
    """

    def read_built_in_attributes(
        self,
        fault: NormalizedFault,
        module: Optional[ModuleDescriptor] = None,
    ) -> dict[str, Any]:
        attributes: dict[str, Any] = {}
        attributes.update(read_memory_information())
        attributes.update(read_process_status())
        attributes.update(read_system_attributes())
        if module is not None:
            attributes.update(module.to_attributes())
        attributes[ERROR_MESSAGE_ATTRIBUTE] = fault.message
        return attributes

    def read_built_in_annotations(self, fault: NormalizedFault) -> dict[str, Any]:
        annotations: dict[str, Any] = {
            ENVIRONMENT_ANNOTATION: dict(os.environ),
            EXEC_ARGUMENTS_ANNOTATION: interpreter_options(getattr(sys, "orig_argv", []), sys.argv),
        }
        if fault.is_exception:
            annotations[EXCEPTION_ANNOTATION] = describe_exception(fault.error)
        return annotations

    async def assemble(
        self,
        identity: ReportIdentity,
        fault: NormalizedFault,
        stack_trace: StackTrace,
        client_attributes: Mapping[str, Any],
        client_annotations: Mapping[str, Any],
        symbolication: SymbolicationResolver,
        module: Optional[ModuleDescriptor] = None,
    ) -> Payload:
        """
        Merge everything into one immutable payload.

        Parameters
        ----------
        identity : ReportIdentity
            uuid, timestamp and environment descriptors of the report.
        fault : NormalizedFault
            Canonical fault; supplies classifiers, error.message and Exception.
        stack_trace : StackTrace
            Parsed frames and source excerpts.
        client_attributes, client_annotations : Mapping[str, Any]
            Caller data, already classified and validated.
        symbolication : SymbolicationResolver
            Decides the mode marker and which symbol map is attached.
        module : ModuleDescriptor | None
            Calling-module metadata, None when unresolved or skipped.

        Returns
        -------
        Payload
        """
        attributes = await asyncio.to_thread(self.read_built_in_attributes, fault, module)
        attributes.update(copy.deepcopy(dict(client_attributes)))

        annotations = self.read_built_in_annotations(fault)
        annotations.update(copy.deepcopy(dict(client_annotations)))

        payload = Payload(
            uuid=identity.uuid,
            timestamp=identity.timestamp,
            lang=identity.lang,
            lang_version=identity.lang_version,
            main_thread=identity.main_thread,
            classifiers=list(fault.classifiers),
            threads={identity.main_thread: stack_trace.to_json()},
            agent=identity.agent,
            agent_version=identity.agent_version,
            annotations=annotations,
            attributes=attributes,
            source_code=stack_trace.get_source_code(),
            symbolication_maps=symbolication.select_maps(stack_trace),
            symbolication=symbolication.mode(),
        )
        logger.debug(
            "Assembled payload %s (%d attributes, %d annotations)",
            identity.uuid, len(attributes), len(annotations),
        )
        return payload
