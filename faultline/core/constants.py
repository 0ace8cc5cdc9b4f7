"""
Constants
Static environment descriptors and wire-format names shared by every report.
"""
import platform

LANG = "python"
LANG_VERSION = platform.python_version()
AGENT_NAME = "faultline"
AGENT_VERSION = "0.1.0"
MAIN_THREAD = "main"

# Payload marker emitted when symbolication is active
SYMBOLICATION_MODE = "sourcemap"

# Attribute keys with special meaning during finalize
APPLICATION_ATTRIBUTE = "application"
SYMBOLICATION_ID_ATTRIBUTE = "symbolication_id"
ERROR_MESSAGE_ATTRIBUTE = "error.message"

# Built-in annotation names
ENVIRONMENT_ANNOTATION = "Environment Variables"
EXEC_ARGUMENTS_ANNOTATION = "Exec Arguments"
EXCEPTION_ANNOTATION = "Exception"
