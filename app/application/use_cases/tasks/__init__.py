"""Task use cases."""

from app.application.use_cases.tasks.task_operations import TaskService, TaskWriteResult

__all__ = ["TaskService", "TaskWriteResult"]
