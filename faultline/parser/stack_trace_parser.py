"""
Stack Trace Parser
==================
Converts a normalized fault into an immutable StackTrace.

Pipeline:
    1. Extract frames from the exception traceback (or the stack captured
       at normalization time), innermost call first
    2. Read every distinct source file once, off the event loop, concurrently
    3. Cut one window of context_line_count lines per frame line,
       tab-expanded to tab_width
    4. Locate the calling module (first frame outside faultline)
    5. Optionally resolve a symbolication id per file

Contract:
    - Tolerant: an unreadable file only drops that file's excerpt.
    - Never reads pseudo files such as <stdin> or <string>.
"""
import asyncio
import json
import logging
import os
import traceback
from typing import Optional

from faultline.core.config import DEFAULT_CONTEXT_LINE_COUNT, DEFAULT_TAB_WIDTH
from faultline.models.frame import Frame, SourceExcerpt
from faultline.models.stack_trace import StackTrace, SymbolicationMapEntry
from faultline.parser.error_normalizer import NormalizedFault
from faultline.utils.identifiers import content_uuid

logger = logging.getLogger(__name__)

_PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_LIBRARY_MARKERS = ("site-packages", "dist-packages")


# ---------------------------------------------------------------------------
# Path Helpers
# ---------------------------------------------------------------------------
def is_pseudo_file(path: str) -> bool:
    """Return True for interpreter placeholders like <stdin> or <frozen os>."""
    return path.startswith("<") and path.endswith(">")


def is_own_frame(path: str) -> bool:
    """Return True if the path lives inside the faultline package."""
    if not path or is_pseudo_file(path):
        return False
    return os.path.abspath(path).startswith(_PACKAGE_ROOT + os.sep)


def is_library_frame(path: str) -> bool:
    if is_own_frame(path):
        return True
    normalized = path.replace("\\", "/")
    return any(f"/{marker}/" in normalized for marker in _LIBRARY_MARKERS)


# ---------------------------------------------------------------------------
# Blocking I/O (always run through asyncio.to_thread)
# ---------------------------------------------------------------------------
def _read_source_lines(path: str) -> Optional[list[str]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Source excerpt unavailable for %s: %s", path, e)
        return None


def _read_symbolication_id(path: str) -> Optional[str]:
    """Id from a sidecar <file>.map (debugId / uuid), else from the file content."""
    map_path = f"{path}.map"
    if os.path.isfile(map_path):
        try:
            with open(map_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                sidecar_id = data.get("debugId") or data.get("uuid")
                if sidecar_id:
                    return str(sidecar_id)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug("Ignoring unreadable symbol map %s: %s", map_path, e)

    try:
        with open(path, "rb") as f:
            return content_uuid(f.read())
    except OSError as e:
        logger.debug("Cannot compute symbolication id for %s: %s", path, e)
        return None


# ---------------------------------------------------------------------------
# Frame Extraction
# ---------------------------------------------------------------------------
def extract_frame_summaries(fault: NormalizedFault) -> list[traceback.FrameSummary]:
    """Return the fault's frames, innermost call first."""
    tb = fault.error.__traceback__
    if tb is not None:
        summaries = list(traceback.extract_tb(tb))
    elif fault.captured_stack is not None:
        summaries = list(fault.captured_stack)
    else:
        summaries = []
    summaries.reverse()
    return summaries


class StackTraceParser:
    """
    Builds StackTrace objects with windowed source excerpts.

    Usage:
        parser = StackTraceParser(tab_width=4, context_line_count=20)
        stack_trace = await parser.parse(normalized_fault, include_symbolication=False)
    """

    def __init__(
        self,
        tab_width: int = DEFAULT_TAB_WIDTH,
        context_line_count: int = DEFAULT_CONTEXT_LINE_COUNT,
    ) -> None:
        self.tab_width = tab_width
        self.context_line_count = context_line_count

    def window(self, line: int) -> tuple[int, int]:
        """
        Compute the 1-based inclusive window of context_line_count lines
        centred on line (before clipping to the file).
        """
        half = self.context_line_count // 2
        start = max(1, line - half)
        end = line + (self.context_line_count - half - 1)
        return start, end

    def build_excerpt(self, path: str, lines: list[str], line: int) -> Optional[SourceExcerpt]:
        start, end = self.window(line)
        end = min(end, len(lines))
        if start > end:
            return None
        text = "\n".join(src.expandtabs(self.tab_width) for src in lines[start - 1:end])
        return SourceExcerpt(
            path=path,
            text=text,
            start_line=start,
            start_column=1,
            tab_width=self.tab_width,
        )

    async def parse(self, fault: NormalizedFault, include_symbolication: bool = False) -> StackTrace:
        """
        Parse the fault's traceback into a StackTrace.

        Parameters
        ----------
        fault : NormalizedFault
            Output of normalize_fault().
        include_symbolication : bool
            Resolve a symbolication id for every readable file.

        Returns
        -------
        StackTrace
            Frames (innermost first), per-file excerpts, symbolication entries.
        """
        summaries = extract_frame_summaries(fault)

        # file → line numbers of its frames, in first-seen order
        lines_by_path: dict[str, list[int]] = {}
        for summary in summaries:
            if summary.lineno is None or is_pseudo_file(summary.filename):
                continue
            frame_lines = lines_by_path.setdefault(summary.filename, [])
            if summary.lineno not in frame_lines:
                frame_lines.append(summary.lineno)

        paths = list(lines_by_path)
        sources = await asyncio.gather(
            *(asyncio.to_thread(_read_source_lines, p) for p in paths)
        )

        # One window per distinct frame line. The first excerpt of a file is
        # keyed by the path itself, further lines by "path:line".
        excerpts: dict[str, SourceExcerpt] = {}
        excerpt_keys: dict[tuple[str, int], str] = {}
        for path, source_lines in zip(paths, sources):
            if source_lines is None:
                continue
            for line in lines_by_path[path]:
                excerpt = self.build_excerpt(path, source_lines, line)
                if excerpt is None:
                    continue
                key = path if path not in excerpts else f"{path}:{line}"
                excerpts[key] = excerpt
                excerpt_keys[(path, line)] = key

        symbol_ids: dict[str, str] = {}
        if include_symbolication:
            readable = [p for p, src in zip(paths, sources) if src is not None]
            resolved = await asyncio.gather(
                *(asyncio.to_thread(_read_symbolication_id, p) for p in readable)
            )
            symbol_ids = {p: sid for p, sid in zip(readable, resolved) if sid}

        frames = [
            Frame(
                path=s.filename,
                line=s.lineno or 0,
                column=s.colno + 1 if getattr(s, "colno", None) is not None else None,
                func_name=s.name or None,
                library=is_library_frame(s.filename),
                source_code=excerpt_keys.get((s.filename, s.lineno)),
                symbolication_id=symbol_ids.get(s.filename),
            )
            for s in summaries
        ]

        calling_module_path = next(
            (f.path for f in frames if not is_own_frame(f.path) and not is_pseudo_file(f.path)),
            None,
        )

        return StackTrace(
            frames=frames,
            source_code=excerpts,
            symbolication_maps=[
                SymbolicationMapEntry(file=p, uuid=sid) for p, sid in symbol_ids.items()
            ],
            calling_module_path=calling_module_path,
        )
