"""
Symbolication Resolver
======================
Decides, once per finalize, how symbolication shows up in the payload.

Rules:
    - Mode marker is set when ANY of: the boolean flag is on, the caller
      attributes carry 'symbolication_id', an explicit map was supplied.
    - The map attached to the payload is the explicit map when supplied,
      otherwise whatever the stack trace parser resolved.
    - The parser resolves per-file ids only when the flag is the sole
      symbolication source.
"""
from typing import Any, Mapping, Optional

from faultline.core.constants import SYMBOLICATION_ID_ATTRIBUTE, SYMBOLICATION_MODE
from faultline.models.stack_trace import StackTrace, SymbolicationMapEntry


class SymbolicationResolver:

    def __init__(
        self,
        flag: bool,
        explicit_map: Optional[list[SymbolicationMapEntry]],
        attributes: Mapping[str, Any],
    ) -> None:
        self.flag = flag
        self.explicit_map = explicit_map
        self.has_attribute_id = bool(attributes.get(SYMBOLICATION_ID_ATTRIBUTE))

    def include_in_parse(self) -> bool:
        """Whether the stack trace parser should resolve per-file ids."""
        return self.flag and not self.has_attribute_id and self.explicit_map is None

    def is_active(self) -> bool:
        return self.flag or self.has_attribute_id or self.explicit_map is not None

    def mode(self) -> Optional[str]:
        return SYMBOLICATION_MODE if self.is_active() else None

    def select_maps(self, stack_trace: StackTrace) -> list[SymbolicationMapEntry]:
        if self.explicit_map is not None:
            return list(self.explicit_map)
        return list(stack_trace.symbolication_maps)
