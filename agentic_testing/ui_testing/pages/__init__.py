"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations built on AgenticPage.

Each page class encapsulates:
    - Element selectors (healed automatically when they drift)
    - Page-specific actions
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import LoginPage

__all__ = [
    "LoginPage",
]
