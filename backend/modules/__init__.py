"""
Feature modules for Peerdex backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- exceptions.py: Module-specific exceptions
- routes.py: FastAPI route handlers (where the module is exposed over HTTP)

Modules communicate through interfaces, not concrete implementations.
"""
