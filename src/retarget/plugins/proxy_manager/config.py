# src/retarget/plugins/proxy_manager/config.py
"""Options for the ``proxy-manager`` driver (``surface.options`` in settings)."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator


class ProxyManagerOptions(BaseModel):
    """Where the manager UI lives and how to reach a logged-in listing.

    Either reuse a saved browser session (``storage_state``) or log in with
    ``email`` / ``password``. Secrets belong in the environment:

        surface:
          driver: proxy-manager
          options:
            url: http://proxy.internal:81/nginx/redirection
            email: ${NPM_EMAIL}
            password: ${NPM_PASSWORD}
    """

    model_config = {"extra": "forbid", "frozen": True}

    url: str = Field(min_length=1, description="Page showing the host listing table")
    browser: Literal["chromium", "firefox", "webkit"] = Field(default="chromium", description="Playwright browser engine")
    headless: bool = Field(default=True, description="Run the browser without a window")
    storage_state: Path | None = Field(default=None, description="Saved Playwright session (cookies, local storage)")
    email: str | None = Field(default=None, description="Login identity, used when the page asks for it")
    password: SecretStr | None = Field(default=None, description="Login secret")
    action_timeout: float = Field(default=2.0, gt=0, description="Seconds a single click or fill may wait for its element")
    navigation_timeout: float = Field(default=30.0, gt=0, description="Seconds to load the listing page")

    @model_validator(mode="after")
    def validate_credentials(self) -> "ProxyManagerOptions":
        if (self.email is None) != (self.password is None):
            raise ValueError("email and password must be given together")
        return self

    @property
    def action_timeout_ms(self) -> float:
        return self.action_timeout * 1000

    @property
    def navigation_timeout_ms(self) -> float:
        return self.navigation_timeout * 1000
