from app.models.task import CategoryInfo, Task, TaskFilter

__all__ = ["CategoryInfo", "Task", "TaskFilter"]
