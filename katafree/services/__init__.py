"""
High-level use cases for the katafree API.

Each service module orchestrates the Repository to implement business rules
(register, login, manage tasks, register/test webhooks).

Routers (FastAPI endpoints) call these services instead of touching the
storage backend directly.
"""
