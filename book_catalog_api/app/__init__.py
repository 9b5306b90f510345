"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules: configuration and infrastructure in ``core``, persistence
in ``repositories``, business logic in ``services``, wire schemas in
``schemas`` and the versioned HTTP routers in ``api``.
"""

from .main import app  # noqa: F401
