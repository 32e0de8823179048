"""
Mentoring test suites package.

Kept importable so that programmatic runners (`run_tests.py`), CI jobs and
the unit tests can import the page layer directly.

No credentials or production secrets live here; target origins come from
`config/config.yaml` and environment variables.
"""
