"""
Service layer.

Each service encapsulates the business rules for one domain and works
against the ``Database`` handle it is constructed with, so API handlers
never touch SQL directly.
"""
