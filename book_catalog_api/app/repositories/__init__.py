"""
Persistence layer.

Repositories hide the SQL behind a small port so the services can be
exercised against any store offering the same operations.
"""
