"""
Payload Model
=============
Frozen pydantic model for the document produced by ReportBuilder.finalize().
This is the wire contract toward whatever delivers reports; field names and
nesting must not change.

Fields (by alias):
    uuid, timestamp, lang, langVersion, mainThread, classifiers,
    threads              — {"main": StackTrace.to_json()}
    agent, agentVersion,
    annotations          — structured values (built-ins overridden by caller values)
    attributes           — scalar values (built-ins overridden by caller values)
    sourceCode           — file path → source excerpt
    symbolication_maps   — explicit map if supplied, else the parser's map
    symbolication        — "sourcemap", present only when symbolication is active
"""
import json
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from .stack_trace import SymbolicationMapEntry

AttributeValue = Union[bool, int, float, str]


class Payload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uuid: str
    timestamp: int
    lang: str
    lang_version: str = Field(alias="langVersion")
    main_thread: str = Field(alias="mainThread")
    classifiers: List[str] = []
    threads: Dict[str, Any]
    agent: str
    agent_version: str = Field(alias="agentVersion")
    annotations: Dict[str, Any] = {}
    attributes: Dict[str, AttributeValue] = {}
    source_code: Dict[str, Any] = Field(default={}, alias="sourceCode")
    symbolication_maps: List[SymbolicationMapEntry] = []
    symbolication: Optional[str] = None

    def to_dict(self) -> dict:
        data = self.model_dump(by_alias=True, mode="json")
        if self.symbolication is None:
            data.pop("symbolication")
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)
