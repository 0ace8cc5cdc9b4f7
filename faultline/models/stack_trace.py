"""
Stack Trace Model
=================
Immutable result of parsing a fault's traceback.

    frames              — innermost call first
    source_code         — excerpt key ("path", or "path:line" for further frames of a file) → SourceExcerpt
    symbolication_maps  — one {file, uuid} entry per resolved file
    calling_module_path — first frame outside faultline (None when every frame is ours)
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from faultline.core.constants import MAIN_THREAD
from .frame import Frame, SourceExcerpt


class SymbolicationMapEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str = Field(min_length=1)
    uuid: str = Field(min_length=1)


class StackTrace(BaseModel):
    model_config = ConfigDict(frozen=True)

    frames: List[Frame] = []
    source_code: Dict[str, SourceExcerpt] = {}
    symbolication_maps: List[SymbolicationMapEntry] = []
    calling_module_path: Optional[str] = None

    def to_json(self) -> dict:
        """Serialize as the thread entry stored under payload.threads.main."""
        return {
            "name": MAIN_THREAD,
            "fault": True,
            "stack": [frame.to_json() for frame in self.frames],
        }

    def get_source_code(self) -> dict:
        return {
            key: excerpt.model_dump(by_alias=True)
            for key, excerpt in self.source_code.items()
        }
