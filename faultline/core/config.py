"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    FAULTLINE_TAB_WIDTH                — Tab expansion width for source excerpts (default: 8)
    FAULTLINE_CONTEXT_LINE_COUNT       — Lines of source kept around each frame (default: 200)
    FAULTLINE_LOG_LEVEL                — Root log level used by setup_logging (default: INFO)
    FAULTLINE_MACHINE_ID_PATHS         — Colon separated files probed for the machine id
    FAULTLINE_ENABLE_PREVIEW_ENDPOINT  — Enable POST /reports/preview (default: false)

Source Code Windows:
    Every frame of a report carries a window of FAULTLINE_CONTEXT_LINE_COUNT
    lines centred on the failing line. Builders read these values once at
    construction; set_source_code_options() overrides them per report.
"""
import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_TAB_WIDTH = int(os.getenv("FAULTLINE_TAB_WIDTH", 8))
DEFAULT_CONTEXT_LINE_COUNT = int(os.getenv("FAULTLINE_CONTEXT_LINE_COUNT", 200))

LOG_LEVEL = os.getenv("FAULTLINE_LOG_LEVEL", "INFO").upper()

MACHINE_ID_PATHS: list[str] = [
    p for p in os.getenv(
        "FAULTLINE_MACHINE_ID_PATHS", "/etc/machine-id:/var/lib/dbus/machine-id"
    ).split(":") if p
]

ENABLE_PREVIEW_ENDPOINT = os.getenv("FAULTLINE_ENABLE_PREVIEW_ENDPOINT", "false").lower() == "true"
