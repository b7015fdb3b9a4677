"""Services module.

Services:
- query.py: List query-parameter parsing
- lifecycle.py: Completion timestamp and due-date rules
- tasks.py: Owner-scoped task repository and statistics
- scoping.py: Principal and per-request task access
- auth.py: Accounts, passwords and JWT management
- users.py: Admin user directory
"""

from taskflow.services.scoping import OwnedTasks, Principal
from taskflow.services.tasks import TaskRepository

__all__ = [
    "OwnedTasks",
    "Principal",
    "TaskRepository",
]
