"""
Service layer abstraction.

Each service encapsulates business logic for a domain and receives the
store it works on, so API handlers never touch the database directly.
"""
