"""Data access managers for the taskflow backend.

Each module provides async functions that encapsulate CRUD operations and
business logic.  Managers accept ``AsyncSession`` as a parameter and raise
domain exceptions from ``taskflow.backend.errors``, never HTTP exceptions --
that translation is the app's exception handlers' responsibility.

Lookups by id return ``None`` for a missing row; absence is not an error.
"""
