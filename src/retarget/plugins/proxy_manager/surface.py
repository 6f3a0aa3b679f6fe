# src/retarget/plugins/proxy_manager/surface.py
"""SurfaceDriver for the reverse-proxy manager web UI, driven by Playwright.

The listing is a Bootstrap table: one row per host, the forward destination
rendered in the fifth column. Each row carries a dropdown whose "Edit" entry
opens a modal editor with the forward domain input and a save button.

Every primitive returns promptly. Presence checks use ``Locator.count()``,
which never waits; clicks and fills wait at most ``action_timeout`` for
their element to become actionable. Waiting for the menu, the editor, or the
editor closing is the engine's job.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog
from playwright.sync_api import Error as PlaywrightError

from retarget.contracts import (
    FieldResolver,
    InputNotification,
    ListingUnavailableError,
    RecordRef,
    SurfaceError,
)
from retarget.plugins.proxy_manager.config import ProxyManagerOptions

if TYPE_CHECKING:
    from playwright.sync_api import Locator, Page

logger = structlog.get_logger(__name__)

LISTING_TABLE = "table"
LISTING_ROWS = "table tbody tr"
LISTED_VALUE_SELECTORS = (
    "td:nth-child(5) div.text-monospace",
    "td:nth-child(5)",
)
MENU_TOGGLE = 'a[data-toggle="dropdown"]'
OPEN_MENU = ".dropdown-menu.dropdown-menu-right.show"
EDIT_ITEM = "a.edit.dropdown-item"
EDITOR = ".modal.show"

# Most specific first; later entries survive markup changes between releases
FIELD_SELECTORS = (
    'input[name="forward_domain_name"]',
    '.modal.show input[name="forward_domain_name"]',
    ".modal.show #details input.text-monospace",
    ".modal.show input.form-control.text-monospace[required]",
)
SAVE_SELECTORS = (
    ".modal.show .btn-teal.save",
    ".modal.show button.save",
    ".modal.show .modal-footer .btn-teal",
)
CLOSE_SELECTORS = (
    ".modal.show .btn-secondary.cancel",
    ".modal.show .cancel",
    '.modal.show button[data-dismiss="modal"]',
    ".modal.show .close",
    '.modal.show button[aria-label="Close"]',
)

LOGIN_IDENTITY = 'input[name="identity"]'
LOGIN_SECRET = 'input[name="secret"]'
LOGIN_SUBMIT = 'button[type="submit"]'


class ProxyManagerError(SurfaceError):
    """A browser action on the manager UI failed (element detached, click timed out)."""


class ProxyManagerSurface:
    """SurfaceDriver over a Playwright page showing the host listing.

    Build one with ``launch()`` for a real browser, or hand the constructor a
    page you already control. ``close()`` runs the teardown callbacks given
    at construction (``launch()`` uses them to stop the browser).
    """

    def __init__(
        self,
        page: Page,
        *,
        options: ProxyManagerOptions,
        on_close: Sequence[Callable[[], None]] = (),
    ) -> None:
        self._page = page
        self._options = options
        self._on_close = list(on_close)

    @classmethod
    def launch(cls, options: ProxyManagerOptions) -> ProxyManagerSurface:
        """Start a browser, open the listing page, and log in when asked to.

        Raises:
            ProxyManagerError: If the browser cannot start or the page cannot be loaded.
        """
        from playwright.sync_api import sync_playwright

        playwright = sync_playwright().start()
        teardown: list[Callable[[], None]] = [playwright.stop]
        try:
            browser = getattr(playwright, options.browser).launch(headless=options.headless)
            teardown.insert(0, browser.close)
            context = browser.new_context(
                storage_state=str(options.storage_state.expanduser()) if options.storage_state is not None else None,
            )
            page = context.new_page()
            page.set_default_timeout(options.action_timeout_ms)
            page.goto(options.url, timeout=options.navigation_timeout_ms)
            surface = cls(page, options=options, on_close=teardown)
            surface._log_in_if_asked()
        except PlaywrightError as e:
            _run_all(teardown)
            raise ProxyManagerError(f"Could not open {options.url}: {e.message}") from e
        except ProxyManagerError:
            _run_all(teardown)
            raise
        logger.info("Manager UI opened", url=options.url, browser=options.browser, headless=options.headless)
        return surface

    def close(self) -> None:
        steps, self._on_close = self._on_close, []
        _run_all(steps)

    # -- listing -----------------------------------------------------------------

    def list_records(self) -> Sequence[RecordRef]:
        if self._page.locator(LISTING_TABLE).count() == 0:
            raise ListingUnavailableError(f"No listing table on {self._page.url}")
        rows = self._page.locator(LISTING_ROWS)
        return [RecordRef(index=position + 1, row=rows.nth(position)) for position in range(rows.count())]

    def read_listed_value(self, record: RecordRef) -> str | None:
        row: Locator = record.row
        for selector in LISTED_VALUE_SELECTORS:
            cell = row.locator(selector)
            if cell.count():
                text: str = cell.first.inner_text()
                return text.strip()
        return None

    # -- action menu -------------------------------------------------------------

    def open_action_menu(self, record: RecordRef) -> bool:
        toggle = record.row.locator(MENU_TOGGLE)
        if toggle.count() == 0:
            return False
        self._click(toggle.first, "menu toggle")
        return True

    def is_menu_open(self, record: RecordRef) -> bool:
        return bool(record.row.locator(OPEN_MENU).count())

    def close_action_menu(self, record: RecordRef) -> None:
        if self.is_menu_open(record):
            self._click(record.row.locator(MENU_TOGGLE).first, "menu toggle")

    # -- editor ------------------------------------------------------------------

    def invoke_edit(self, record: RecordRef) -> bool:
        edit = record.row.locator(EDIT_ITEM)
        if edit.count() == 0:
            return False
        self._click(edit.first, "edit item")
        return True

    def is_editor_open(self) -> bool:
        return bool(self._page.locator(EDITOR).count())

    def field_resolvers(self) -> Sequence[FieldResolver]:
        return [self._resolver(selector) for selector in FIELD_SELECTORS]

    def read_field(self, handle: Locator) -> str:
        try:
            value: str = handle.input_value(timeout=self._options.action_timeout_ms)
        except PlaywrightError as e:
            raise ProxyManagerError(f"Could not read the editor field: {e.message}") from e
        return value

    def set_field_and_notify(
        self,
        handle: Locator,
        value: str,
        notifications: Sequence[InputNotification],
    ) -> None:
        timeout = self._options.action_timeout_ms
        try:
            handle.fill("", timeout=timeout)
            handle.focus(timeout=timeout)
            handle.fill(value, timeout=timeout)
            for notification in notifications:
                handle.dispatch_event(notification.value, timeout=timeout)
        except PlaywrightError as e:
            raise ProxyManagerError(f"Could not write the editor field: {e.message}") from e

    def invoke_save(self) -> bool:
        for selector in SAVE_SELECTORS:
            button = self._page.locator(selector)
            if button.count() == 0:
                continue
            if button.first.is_disabled():
                logger.debug("Save control disabled", selector=selector)
                return False
            self._click(button.first, "save control")
            return True
        return False

    def force_close_editor(self) -> None:
        if not self.is_editor_open():
            return
        for selector in CLOSE_SELECTORS:
            button = self._page.locator(selector)
            if button.count():
                logger.debug("Closing editor", via=selector)
                self._click(button.first, "close control")
                return
        logger.debug("Closing editor", via="Escape")
        self._page.keyboard.press("Escape")

    # -- internals ---------------------------------------------------------------

    def _resolver(self, selector: str) -> FieldResolver:
        def resolve() -> Any:
            field = self._page.locator(selector)
            if field.count() == 0:
                return None
            if selector != FIELD_SELECTORS[0]:
                logger.debug("Editor field found by fallback selector", selector=selector)
            return field.first

        return resolve

    def _click(self, locator: Locator, what: str) -> None:
        try:
            locator.click(timeout=self._options.action_timeout_ms)
        except PlaywrightError as e:
            raise ProxyManagerError(f"Could not click the {what}: {e.message}") from e

    def _log_in_if_asked(self) -> None:
        page = self._page
        if page.locator(LOGIN_IDENTITY).count() == 0:
            return
        options = self._options
        if options.email is None or options.password is None:
            raise ProxyManagerError(f"{options.url} asks for a login; set surface.options.email and password")
        page.locator(LOGIN_IDENTITY).fill(options.email)
        page.locator(LOGIN_SECRET).fill(options.password.get_secret_value())
        page.locator(LOGIN_SUBMIT).click()
        page.goto(options.url, timeout=options.navigation_timeout_ms)
        page.locator(LISTING_TABLE).first.wait_for(timeout=options.navigation_timeout_ms)
        logger.info("Logged in to manager UI", url=options.url)


def _run_all(steps: Sequence[Callable[[], None]]) -> None:
    for step in steps:
        step()
