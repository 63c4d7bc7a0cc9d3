"""SQLAlchemy ORM models package."""

from artifactory_roles.models.orm.base import Base
from artifactory_roles.models.orm.role_record import RoleRecordORM

__all__ = [
    "Base",
    "RoleRecordORM",
]
