"""Headless page controllers, one per client screen."""

from voxmail.client.pages.base import Page, PageContext
from voxmail.client.pages.compose import ComposePage
from voxmail.client.pages.email_view import EmailViewPage
from voxmail.client.pages.inbox import InboxPage
from voxmail.client.pages.login import LoginPage
from voxmail.client.pages.register import RegisterPage
from voxmail.client.pages.settings import SettingsPage
from voxmail.voice.models import PageName

PAGE_CLASSES: dict[PageName, type[Page]] = {
    PageName.INBOX: InboxPage,
    PageName.COMPOSE: ComposePage,
    PageName.EMAIL_VIEW: EmailViewPage,
    PageName.SETTINGS: SettingsPage,
    PageName.LOGIN: LoginPage,
    PageName.REGISTER: RegisterPage,
}

__all__ = [
    "ComposePage",
    "EmailViewPage",
    "InboxPage",
    "LoginPage",
    "PAGE_CLASSES",
    "Page",
    "PageContext",
    "RegisterPage",
    "SettingsPage",
]
