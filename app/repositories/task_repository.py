"""Task repository implementation using PostgreSQL."""
from typing import Optional
from app.core.constants import TaskStatus
from app.models.planning import Task
from app.repositories.base import AccountScopedRepository


class TaskRepository(AccountScopedRepository[Task]):
    model = Task

    async def update_status(self, account_id: str, task_id: int, status: TaskStatus | str) -> Optional[Task]:
        """Set a task's status. Any status may move to any other."""
        return await self.update(account_id, task_id, {"status": TaskStatus(status).value})
