"""
Core Domain Layer - the hexagon.

Pure business logic for projects, statuses, workflows and tickets.
- No framework imports (Django, Celery, ...)
- Fully testable without a database
- Infrastructure agnostic
"""
