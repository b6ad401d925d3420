"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Page Object for the login screen of the bundled demo site.

Design goals:
  - Locators kept in one place as class attributes
  - Fluent action methods (each returns the page object)
  - Verification helpers that never raise on a missing element

================================================================================
"""

from __future__ import annotations

import allure

from webtests.ui_testing.framework.page_base import BasePage


class LoginPage(BasePage):
    """Login page object (async)."""

    URL_PATH = "/login.html"

    USERNAME_INPUT = "[data-testid='input-username']"
    PASSWORD_INPUT = "[data-testid='input-password']"
    LOGIN_BUTTON = "[data-testid='btn-login']"
    ERROR_MESSAGE = "[data-testid='error-message']"

    @allure.step("Open login page")
    async def load(self) -> "LoginPage":
        """Navigate to the login page and wait until it has loaded."""
        await self.navigate()
        await self.wait_for_load()
        return self

    async def enter_username(self, username: str) -> "LoginPage":
        await self.fill(self.USERNAME_INPUT, username)
        return self

    async def enter_password(self, password: str) -> "LoginPage":
        await self.fill(self.PASSWORD_INPUT, password)
        return self

    async def submit(self) -> "LoginPage":
        await self.click(self.LOGIN_BUTTON)
        return self

    @allure.step("Login (username={username})")
    async def login(self, username: str, password: str) -> "LoginPage":
        """Fill both credentials and submit the form."""
        await self.enter_username(username)
        await self.enter_password(password)
        return await self.submit()

    @allure.step("Verify login form is displayed")
    async def is_form_displayed(self) -> bool:
        return (
            await self.is_visible(self.USERNAME_INPUT)
            and await self.is_visible(self.PASSWORD_INPUT)
            and await self.is_visible(self.LOGIN_BUTTON)
        )

    async def error_message(self) -> str:
        """Visible error text, or an empty string when no error is shown."""
        if not await self.is_visible(self.ERROR_MESSAGE, timeout=2000):
            return ""
        return await self.text_of(self.ERROR_MESSAGE)
