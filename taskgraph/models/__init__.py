# SQLModel definitions, imported here to ensure metadata is populated for create_all.
from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .project import Project  # noqa: F401
from .task import Task  # noqa: F401
from .dependency import TaskDependency  # noqa: F401
from .audit import AuditLog  # noqa: F401
