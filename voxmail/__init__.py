"""VoxMail - webmail with voice-command accessibility.

Packages:
    voice/:   Command interpreter, speech adapters, voice session controller
    client/:  REST client, session/auth, email store, page controllers
    server/:  FastAPI backend (auth, emails, voice interpretation)

Usage:
    from voxmail.voice.parser.intent_parser import interpret
    from voxmail.voice.parser.command_tables import build_table

    table = build_table(PageName.COMPOSE)
    intent = interpret("clear all", FocusContext.BODY, table)
"""

from pathlib import Path

__version__ = "0.1.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
CONFIG_PATH = PROJECT_ROOT / "args" / "voxmail.yaml"

__all__ = [
    "CONFIG_PATH",
    "DATA_DIR",
    "PROJECT_ROOT",
    "__version__",
]
