"""Command vocabulary, parsing and dispatch."""

from .builtin import builtin_descriptors, register_builtin_commands
from .detector import CommandParser, ParsedCommand, detect_command
from .registry import CommandDescriptor, CommandRegistry

__all__ = [
    "CommandDescriptor",
    "CommandParser",
    "CommandRegistry",
    "ParsedCommand",
    "builtin_descriptors",
    "detect_command",
    "register_builtin_commands",
]
