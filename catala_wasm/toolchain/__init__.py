from .base import BaseRunner, ExecutionResult, format_command
from .local import LocalRunner

__all__ = ["BaseRunner", "ExecutionResult", "LocalRunner", "format_command"]
