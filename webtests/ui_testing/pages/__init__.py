"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the demo application.

Each page class encapsulates:
    - Element locators
    - Page-specific fluent actions
    - Verification helpers

================================================================================
"""

from .login_page import LoginPage
from .dashboard_page import DashboardPage

__all__ = [
    "LoginPage",
    "DashboardPage",
]
