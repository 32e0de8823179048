"""Playwright UI automation: framework, page objects and scenarios."""
