# PATH: strategy/jobs/__init__.py
"""
Strategy jobs package.

Available entry points:
    python -m strategy.jobs.run_hawk          # Pool scanner
    python -m strategy.jobs.check_connection  # Pre-flight checks

NOTE: This __init__.py intentionally does NOT import the jobs, to avoid
side effects (logging setup, .env loading) when importing the package.
"""

__all__: list[str] = []
