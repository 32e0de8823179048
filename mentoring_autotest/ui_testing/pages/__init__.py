"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the mentoring feature.

Each page class encapsulates:
    - Element candidate lists
    - Page-specific actions
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .mentoring_page import MentoringPage

__all__ = [
    "MentoringPage",
]
