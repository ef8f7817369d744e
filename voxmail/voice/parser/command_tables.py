"""Per-page voice command tables.

Every table opens with "stop listening" and closes with "help". Signed-in
pages also share a head of navigation rules (compose, inbox, starred,
sent, settings, log out) and yes/no answers for spoken confirmations.
A page never gets a rule that navigates to the route it is already on.

Usage:
    from voxmail.voice.parser.command_tables import build_table

    table = build_table(PageName.INBOX, "/")
"""

from __future__ import annotations

import re
from functools import lru_cache

from voxmail.voice.models import FieldKind, FocusContext, Intent, PageName, Route
from voxmail.voice.parser.entity_extractor import (
    extract_assignment,
    parse_position,
    spoken_to_email,
)
from voxmail.voice.parser.intent_parser import (
    CommandRule,
    CommandTable,
    IntentBuilder,
    RuleCategory,
    Utterance,
)

NAV = RuleCategory.NAVIGATION
CLEAR = RuleCategory.DESTRUCTIVE
SUBMIT = RuleCategory.SUBMISSION
FOCUS = RuleCategory.FOCUS
ACTION = RuleCategory.ACTION

# Toggle and confirmation names shared with the session controller and pages
LISTENING = "listening"
HIGH_CONTRAST = "high_contrast"
LOGOUT = "logout"

LOGOUT_PROMPT = "Are you sure you want to log out? Say yes to confirm"
READ_PROMPT = "Which email would you like to read?"
DELETE_PROMPT = "Which email would you like to delete?"

PAGE_FIELDS: dict[PageName, frozenset[FocusContext]] = {
    PageName.INBOX: frozenset({FocusContext.SEARCH}),
    PageName.COMPOSE: frozenset({FocusContext.RECIPIENT, FocusContext.SUBJECT, FocusContext.BODY}),
    PageName.EMAIL_VIEW: frozenset(),
    PageName.SETTINGS: frozenset(),
    PageName.LOGIN: frozenset({FocusContext.EMAIL, FocusContext.PASSWORD}),
    PageName.REGISTER: frozenset(
        {FocusContext.NAME, FocusContext.EMAIL, FocusContext.PASSWORD}
    ),
}

DEFAULT_ROUTES: dict[PageName, str | None] = {
    PageName.INBOX: Route.INBOX.value,
    PageName.COMPOSE: Route.COMPOSE.value,
    PageName.EMAIL_VIEW: None,
    PageName.SETTINGS: Route.SETTINGS.value,
    PageName.LOGIN: Route.LOGIN.value,
    PageName.REGISTER: Route.REGISTER.value,
}

SIGNED_IN_PAGES = frozenset(
    {PageName.INBOX, PageName.COMPOSE, PageName.EMAIL_VIEW, PageName.SETTINGS}
)

# Spoken field names → focus targets
FIELD_WORDS: dict[str, FocusContext] = {
    "recipient": FocusContext.RECIPIENT,
    "to": FocusContext.RECIPIENT,
    "subject": FocusContext.SUBJECT,
    "body": FocusContext.BODY,
    "message": FocusContext.BODY,
    "content": FocusContext.BODY,
    "search": FocusContext.SEARCH,
    "name": FocusContext.NAME,
    "email": FocusContext.EMAIL,
    "password": FocusContext.PASSWORD,
}

_EMAIL_NOUN = r"(?:email|message|mail)"
# "<verb> email 3", "<verb> the third email", "<verb> the last one"
_POSITIONAL = (
    r"^(?:{verbs}) (?:the )?"
    rf"(?:{_EMAIL_NOUN} (?:number )?(?P<a>\w+)|(?P<b>\w+) {_EMAIL_NOUN}|(?P<c>\w+) one)$"
)


# =============================================================================
# Builders
# =============================================================================


def _const(intent: Intent) -> IntentBuilder:
    return lambda match, utterance, focus: intent


def _rule(
    category: RuleCategory,
    pattern: str,
    build: Intent | IntentBuilder,
    command: str = "",
    example: str = "",
    route: str | None = None,
) -> CommandRule:
    if isinstance(build, Intent):
        build = _const(build)
    return CommandRule(category, pattern, build, command=command, example=example, route=route)


def _navigate(
    pattern: str, route: Route, command: str, example: str, category: RuleCategory = NAV
) -> CommandRule:
    return _rule(category, pattern, Intent.navigate(route.value), command, example, route.value)


def _focus_word(group: str = "f") -> IntentBuilder:
    def build(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
        target = FIELD_WORDS.get(match.group(group))
        return Intent.focus(target) if target else None

    return build


def _clear_word(group: str = "f") -> IntentBuilder:
    def build(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
        target = FIELD_WORDS.get(match.group(group))
        return Intent.clear_field(target) if target else None

    return build


def _clear_focused(fields: frozenset[FocusContext]) -> IntentBuilder:
    """Bare "clear" clears whichever field has focus; no field, no match."""

    def build(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
        return Intent.clear_field(focus) if focus in fields else None

    return build


def _positional(name: str) -> IntentBuilder:
    def build(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
        token = match.group("a") or match.group("b") or match.group("c")
        position = parse_position(token or "")
        if position is None:
            return None
        return Intent.action(name, str(position))

    return build


def _search(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
    query = utterance.original(match, "q")
    return Intent.set_field(FocusContext.SEARCH, query) if query else None


def _label(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
    label = utterance.original(match, "label")
    return Intent.action("label", label) if label else None


def _font_size(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
    text = utterance.lower
    if re.search(r"\bsmall(?:er)?\b", text):
        return Intent.action("font_size", "small")
    if re.search(r"\b(?:medium|normal|default)\b", text):
        return Intent.action("font_size", "medium")
    if re.search(r"\b(?:large|larger|big|bigger)\b", text):
        return Intent.action("font_size", "large")
    return None


def _contrast(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
    text = utterance.lower
    # "disable high contrast" mentions "high": off-words are checked first
    if re.search(r"\b(?:disable|turn off|switch off|off|normal|low)\b", text):
        return Intent.toggle(HIGH_CONTRAST, False)
    if re.search(r"\b(?:enable|turn on|switch on|on|high)\b", text):
        return Intent.toggle(HIGH_CONTRAST, True)
    return Intent.toggle(HIGH_CONTRAST)


def _voice_speed(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
    text = utterance.lower
    if re.search(r"\b(?:slow|slower|decrease|down|reduce)\b", text):
        return Intent.action("voice_speed", "slower")
    if re.search(r"\b(?:fast|faster|increase|up|quicker)\b", text):
        return Intent.action("voice_speed", "faster")
    if re.search(r"\b(?:normal|default|reset)\b", text):
        return Intent.action("voice_speed", "normal")
    return None


def _assignments(keys: tuple[tuple[str, FocusContext], ...]) -> IntentBuilder:
    """Collect every "<key> is <value>" phrase into one SetField."""
    names = tuple(key for key, _ in keys)

    def build(match: re.Match[str], utterance: Utterance, focus: FocusContext) -> Intent | None:
        found: list[tuple[int, FocusContext, str]] = []
        for key, target in keys:
            stops = tuple(name for name in names if name != key)
            span = extract_assignment(utterance.lower, key, stops)
            if span is None:
                continue
            value = utterance.segment(*span)
            if target.kind == FieldKind.EMAIL_ADDRESS:
                value = spoken_to_email(value)
            found.append((span[0], target, value))
        if not found:
            return None
        found.sort(key=lambda item: item[0])
        return Intent.set_fields(*((target, value) for _, target, value in found))

    return build


# =============================================================================
# Shared head and tail
# =============================================================================


def _stop_listening_rule() -> CommandRule:
    return _rule(
        NAV,
        r"^stop listening$|\b(?:stop|turn off|disable) (?:listening|voice(?: commands)?)\b",
        Intent.toggle(LISTENING, False),
        "Stop listening",
        "stop listening",
    )


def _signed_in_head() -> list[CommandRule]:
    return [
        _navigate(
            r"\bcompose\b|\b(?:new|write(?: an?)?) (?:email|message)\b",
            Route.COMPOSE, "Compose a new email", "compose",
        ),
        _navigate(r"\binbox\b", Route.INBOX, "Go to the inbox", "inbox"),
        _navigate(r"\bstarred\b", Route.STARRED, "Show starred emails", "starred"),
        _navigate(
            r"\bsent (?:emails?|messages?|mail|folder|items)\b"
            r"|\b(?:go to|open|show(?: me)?) (?:the |my )?sent\b",
            Route.SENT, "Show sent emails", "sent emails",
        ),
        _navigate(r"\bsettings\b", Route.SETTINGS, "Open settings", "settings"),
        _rule(
            NAV,
            r"\b(?:log ?out|sign ?out)\b",
            Intent.speak(LOGOUT_PROMPT, confirmation=LOGOUT),
            "Log out",
            "log out",
        ),
    ]


def _confirmation_rules() -> list[CommandRule]:
    return [
        _rule(
            ACTION,
            r"^(?:yes|yeah|yep|sure|confirm)(?: please| i am| i'm sure)?[.!]?$",
            Intent.confirm(True),
        ),
        _rule(ACTION, r"^(?:no|nope|never ?mind)[.!]?$", Intent.confirm(False)),
    ]


def _help_rule(rules: list[CommandRule]) -> CommandRule:
    examples = [f'"{rule.example}"' for rule in rules if rule.example]
    text = "You can say " + ", ".join(examples) + "." if examples else "No voice commands here."
    return _rule(
        ACTION, r"^(?:help|what can i say|commands)[?.]?$", Intent.speak(text), "Help", "help"
    )


# =============================================================================
# Page rules
# =============================================================================


def _inbox_rules() -> list[CommandRule]:
    fields = PAGE_FIELDS[PageName.INBOX]
    return [
        _rule(
            CLEAR,
            _POSITIONAL.format(verbs="delete|remove|trash"),
            _positional("delete_email"),
            "Delete email N",
            "delete email 2",
        ),
        _rule(
            CLEAR,
            r"^(?:clear|reset) (?:the )?search(?: box| field)?$",
            Intent.clear_field(FocusContext.SEARCH),
            "Clear the search",
            "clear search",
        ),
        _rule(CLEAR, r"^(?:clear|erase)(?: (?:it|this|this field|field))?$", _clear_focused(fields)),
        _rule(
            FOCUS,
            r"^(?:go to|focus(?: on)?|select) (?:the )?search(?: box| field)?$",
            Intent.focus(FocusContext.SEARCH),
            "Focus the search box",
        ),
        _rule(
            ACTION,
            _POSITIONAL.format(verbs="open|read|show|view"),
            _positional("open_email"),
            "Open email N",
            "open the first email",
        ),
        _rule(
            ACTION,
            _POSITIONAL.format(verbs="unstar|star|flag|unflag"),
            _positional("star_email"),
            "Star email N",
            "star email 3",
        ),
        _rule(
            ACTION,
            r"^(?:search|find|look)(?: for)? (?P<q>.+)$",
            _search,
            "Search for a word",
            "search for invoice",
        ),
        _rule(
            ACTION,
            r"^(?:refresh|reload|check (?:for )?(?:new )?(?:mail|emails?))$",
            Intent.action("refresh"),
            "Refresh",
            "refresh",
        ),
        _rule(
            ACTION,
            r"\b(?:how many (?:emails|messages)|unread (?:count|emails|messages)"
            r"|inbox summary|what'?s new)\b",
            Intent.action("summary"),
            "Inbox summary",
            "how many emails",
        ),
        _rule(
            ACTION,
            rf"^(?:read|open) (?:an? |the )?{_EMAIL_NOUN}$",
            Intent.speak(READ_PROMPT),
        ),
        _rule(
            ACTION,
            rf"^(?:delete|remove) (?:an? |the )?{_EMAIL_NOUN}$",
            Intent.speak(DELETE_PROMPT),
        ),
    ]


def _compose_rules() -> list[CommandRule]:
    fields = PAGE_FIELDS[PageName.COMPOSE]
    return [
        _rule(
            NAV,
            r"^(?:cancel|go back|back|discard)"
            r"(?: (?:it|this|email|message|this email|this message))?$",
            Intent.navigate(Route.INBOX.value),
            "Cancel and go back",
            "cancel",
        ),
        _rule(
            CLEAR,
            r"^(?:clear|delete|erase|reset) (?:all|everything|(?:the )?form|all fields)$",
            Intent.clear_field(None),
            "Clear all fields",
            "clear all",
        ),
        _rule(
            CLEAR,
            r"^(?:clear|delete|erase) (?:the )?(?P<f>subject|body|message|content|recipient|to)"
            r"(?: field| line| address)?$",
            _clear_word(),
            "Clear a field",
            "clear subject",
        ),
        _rule(
            CLEAR,
            r"^(?:clear|remove|delete) (?:all )?(?:the )?attachments?$",
            Intent.action("clear_attachments"),
            "Remove attachments",
        ),
        _rule(CLEAR, r"^(?:clear|erase)(?: (?:it|this|this field|field))?$", _clear_focused(fields)),
        _rule(
            SUBMIT,
            r"^(?:send|submit)(?: (?:it|this|the|now|email|message|mail))*$",
            Intent.submit(),
            "Send the email",
            "send",
        ),
        _rule(
            FOCUS,
            r"^(?:go to|focus(?: on)?|move to|switch to|edit|select) (?:the )?"
            r"(?P<f>subject|body|message|content|recipient|to)(?: field| line| address)?$",
            _focus_word(),
            "Move to a field",
            "go to subject",
        ),
    ]


def _email_view_rules() -> list[CommandRule]:
    return [
        _navigate(
            r"(?:^|\band )(?:go )?back(?: to (?:the )?inbox)?$|^return(?: to (?:the )?inbox)?$",
            Route.INBOX,
            "Back to the inbox",
            "go back",
        ),
        _rule(
            CLEAR,
            r"^(?:clear|remove) (?:all )?(?:the )?labels?$",
            Intent.action("clear_labels"),
            "Remove labels",
        ),
        _rule(
            CLEAR,
            r"\b(?:delete|trash)\b|\bremove\b(?! (?:the )?(?:star|labels?)\b)",
            Intent.action("delete"),
            "Delete this email",
            "delete",
        ),
        _rule(ACTION, r"\b(?:reply|respond)\b", Intent.action("reply"), "Reply", "reply"),
        _rule(ACTION, r"\bforward\b", Intent.action("forward"), "Forward", "forward"),
        _rule(
            ACTION,
            r"^(?:label|tag)(?: (?:it|this|email|message|this email))?(?: as| with)? (?P<label>.+)$",
            _label,
            "Label this email",
            "label as work",
        ),
        _rule(
            ACTION,
            r"\b(?:unstar|remove (?:the )?star)\b",
            Intent.action("star", "off"),
            "Unstar",
        ),
        _rule(
            ACTION,
            r"\bstar\b|\bmark (?:it )?(?:as )?important\b",
            Intent.action("star", "on"),
            "Star this email",
            "star",
        ),
        # "stop reading" contains "read": keep it ahead of read aloud
        _rule(
            ACTION,
            r"\bstop (?:reading|speaking|talking)\b|^(?:quiet|silence|be quiet)$",
            Intent.action("stop_reading"),
            "Stop reading",
            "stop reading",
        ),
        _rule(
            ACTION,
            r"\b(?:read|speak|tell me)\b",
            Intent.action("read_aloud"),
            "Read aloud",
            "read aloud",
        ),
    ]


def _settings_rules() -> list[CommandRule]:
    return [
        _rule(
            SUBMIT,
            r"\b(?:save|update|apply)\b(?!.*\b(?:font|text|contrast|speed|rate)\b)",
            Intent.submit(),
            "Save settings",
            "save",
        ),
        _rule(
            ACTION,
            r"\btest (?:the )?(?:voice|speech)\b",
            Intent.action("test_voice"),
            "Test the voice speed",
            "test voice",
        ),
        _rule(
            ACTION,
            r"\b(?:font|text) size\b|\bmake (?:the )?text (?:smaller|bigger|larger)\b",
            _font_size,
            "Set font size",
            "set font size to large",
        ),
        _rule(
            ACTION,
            r"\bcontrast\b",
            _contrast,
            "Turn high contrast on or off",
            "enable high contrast",
        ),
        _rule(
            ACTION,
            r"\b(?:voice|speaking|speech|talking) (?:speed|rate)\b|^(?:speak|talk) (?:slower|faster)$",
            _voice_speed,
            "Change voice speed",
            "voice speed faster",
        ),
    ]


def _login_rules() -> list[CommandRule]:
    fields = PAGE_FIELDS[PageName.LOGIN]
    return [
        _navigate(
            r"^(?:go to )?(?:register|sign up|create (?:an )?account)(?: page| instead)?$",
            Route.REGISTER, "Create an account", "register",
        ),
        _rule(CLEAR, r"^(?:clear|reset) (?:all|everything|(?:the )?form)$", Intent.clear_field(None)),
        _rule(CLEAR, r"^clear (?:the )?(?P<f>email|password)(?: field)?$", _clear_word()),
        _rule(CLEAR, r"^(?:clear|erase)(?: (?:it|this|this field|field))?$", _clear_focused(fields)),
        _rule(
            SUBMIT,
            r"^(?:please )?(?:log ?in|sign in|submit)(?: now| please)?$",
            Intent.submit(),
            "Log in",
            "log in",
        ),
        _rule(
            FOCUS,
            r"^(?:go to|focus(?: on)?|select) (?:the )?(?P<f>email|password)(?: field)?$",
            _focus_word(),
            "Move to a field",
            "go to password",
        ),
        _rule(
            ACTION,
            r"\b(?:email|password) is\b",
            _assignments((("email", FocusContext.EMAIL), ("password", FocusContext.PASSWORD))),
            "Fill in a field",
            "email is jane at example dot com",
        ),
    ]


def _register_rules() -> list[CommandRule]:
    fields = PAGE_FIELDS[PageName.REGISTER]
    return [
        _navigate(
            r"^(?:go to )?(?:log ?in|sign in)(?: page| instead)?$",
            Route.LOGIN, "Back to log in", "log in",
        ),
        _rule(CLEAR, r"^(?:clear|reset) (?:all|everything|(?:the )?form)$", Intent.clear_field(None)),
        _rule(CLEAR, r"^clear (?:the )?(?P<f>name|email|password)(?: field)?$", _clear_word()),
        _rule(CLEAR, r"^(?:clear|erase)(?: (?:it|this|this field|field))?$", _clear_focused(fields)),
        _rule(
            SUBMIT,
            r"^(?:please )?(?:register|sign up|create (?:my |an )?account|submit)(?: now| please)?$",
            Intent.submit(),
            "Create the account",
            "register",
        ),
        _rule(
            FOCUS,
            r"^(?:go to|focus(?: on)?|select) (?:the )?(?P<f>name|email|password)(?: field)?$",
            _focus_word(),
            "Move to a field",
            "go to name",
        ),
        _rule(
            ACTION,
            r"\b(?:name|email|password) is\b",
            _assignments(
                (
                    ("name", FocusContext.NAME),
                    ("email", FocusContext.EMAIL),
                    ("password", FocusContext.PASSWORD),
                )
            ),
            "Fill in a field",
            "name is Jane Doe",
        ),
    ]


PAGE_RULES = {
    PageName.INBOX: _inbox_rules,
    PageName.COMPOSE: _compose_rules,
    PageName.EMAIL_VIEW: _email_view_rules,
    PageName.SETTINGS: _settings_rules,
    PageName.LOGIN: _login_rules,
    PageName.REGISTER: _register_rules,
}


@lru_cache(maxsize=None)
def build_table(page: PageName, route: str | None = None) -> CommandTable:
    """Build the command table for a page mounted at ``route``.

    ``route`` defaults to the page's usual route; rules navigating to it
    are left out.
    """
    if route is None:
        route = DEFAULT_ROUTES[page]

    rules: list[CommandRule] = [_stop_listening_rule()]
    if page in SIGNED_IN_PAGES:
        rules.extend(_signed_in_head())
    rules.extend(PAGE_RULES[page]())
    rules = [rule for rule in rules if rule.route is None or rule.route != route]

    if page in SIGNED_IN_PAGES:
        rules.extend(_confirmation_rules())
    rules.append(_help_rule(rules))

    return CommandTable(page=page, rules=tuple(rules), fields=PAGE_FIELDS[page])


__all__ = [
    "DELETE_PROMPT",
    "HIGH_CONTRAST",
    "LISTENING",
    "LOGOUT",
    "LOGOUT_PROMPT",
    "PAGE_FIELDS",
    "READ_PROMPT",
    "build_table",
]
