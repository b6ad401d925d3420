"""
================================================================================
Dashboard Page Object (Async / Playwright)
================================================================================

Page Object for the dashboard shown after a successful login.

================================================================================
"""

from __future__ import annotations

import allure

from webtests.ui_testing.framework.page_base import BasePage


class DashboardPage(BasePage):
    """Dashboard page object (async)."""

    URL_PATH = "/dashboard.html"

    TITLE = "[data-testid='dashboard-title']"
    CURRENT_USER = "#current-user"
    LOGOUT_BUTTON = "[data-testid='btn-logout']"

    @allure.step("Wait for dashboard")
    async def wait_until_loaded(self) -> "DashboardPage":
        await self.wait_for_url("**/dashboard.html")
        await self.wait_for_element(self.TITLE)
        return self

    async def current_user(self) -> str:
        return await self.text_of(self.CURRENT_USER)

    @allure.step("Logout")
    async def logout(self) -> "DashboardPage":
        await self.click(self.LOGOUT_BUTTON)
        await self.wait_for_url("**/login.html")
        return self
