"""Voice command parsing: entity extraction, command tables, interpretation, routing."""

from voxmail.voice.parser.command_router import IntentRouter
from voxmail.voice.parser.command_tables import build_table
from voxmail.voice.parser.intent_parser import CommandRule, CommandTable, RuleCategory, interpret

__all__ = [
    "CommandRule",
    "CommandTable",
    "IntentRouter",
    "RuleCategory",
    "build_table",
    "interpret",
]
