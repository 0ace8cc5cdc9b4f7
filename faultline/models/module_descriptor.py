"""
Module Descriptor Model
Project metadata of the module that reported the fault, read from its pyproject.toml.
"""
from typing import Optional
from pydantic import BaseModel


class ModuleDescriptor(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    main: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None

    def to_attributes(self) -> dict:
        """Return the descriptor as report attributes, dropping unknown fields."""
        return {k: v for k, v in self.model_dump().items() if v is not None}
