"""
Frame Model
===========
Pydantic models for one stack entry and the source window attached to it.

Fields (Frame):
    path              — file path as reported by the interpreter
    line              — 1-based line number
    column            — 1-based column when the interpreter knows it
    func_name         — enclosing function name
    library           — True for frames inside installed packages or faultline itself
    source_code       — key into StackTrace.source_code (None if the file was unreadable)
    symbolication_id  — symbol map identifier, only set when symbolication ran

Serialized with camelCase aliases because the aggregation service expects them.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SourceExcerpt(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    text: str
    start_line: int = Field(alias="startLine")
    start_column: int = Field(default=1, alias="startColumn")
    tab_width: int = Field(alias="tabWidth")


class Frame(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    line: int
    column: Optional[int] = None
    func_name: Optional[str] = Field(default=None, alias="funcName")
    library: bool = False
    source_code: Optional[str] = Field(default=None, alias="sourceCode")
    symbolication_id: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
