"""Voice Interface - hands-free mail handling for every page.

Components:
    models.py: Focus contexts, intents, result types
    recognition/: Speech I/O adapters (Web Speech bridge, console, unavailable)
    parser/: Entity extraction, command tables, interpreter, intent routing
    session_controller.py: Idle/Listening state machine per mounted page

Usage:
    from voxmail.voice.models import FocusContext, PageName
    from voxmail.voice.parser.command_tables import build_table
    from voxmail.voice.parser.intent_parser import interpret

    intent = interpret("go to subject", FocusContext.BODY, build_table(PageName.COMPOSE))
"""
