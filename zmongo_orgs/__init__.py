# zmongo_orgs/__init__.py
"""
Public package API.
Use only relative imports here to avoid circular imports.
"""
from .errors import NotFoundError, StoreError, ValidationError, ZMongoError
from .models import (
    Organization,
    OrganizationUpdate,
    OrganizationUserCount,
    PopulatedProject,
    PopulatedUser,
    Project,
    ProjectUpdate,
    Role,
    User,
    UserUpdate,
    validate,
)
from .organization_service import OrganizationService
from .project_service import ProjectService
from .reports import users_per_organization
from .safe_result import SafeResult
from .user_service import UserService
from .zmongo import ZMongo

__version__ = "0.1.0"

__all__ = [
    "ZMongo",
    "SafeResult",
    "ZMongoError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "Organization",
    "OrganizationUpdate",
    "User",
    "UserUpdate",
    "PopulatedUser",
    "Project",
    "ProjectUpdate",
    "PopulatedProject",
    "OrganizationUserCount",
    "Role",
    "validate",
    "OrganizationService",
    "UserService",
    "ProjectService",
    "users_per_organization",
]
