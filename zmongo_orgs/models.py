# zmongo_orgs/models.py
"""
Record shapes for the organizations, users and projects collections.

Each entity that references an Organization has two shapes: the stored one,
where ``organization`` is the referenced _id as a string, and a Populated*
one, where ``organization`` is the full Organization record. A partial
*Update model carries only the fields a caller explicitly supplied.
"""
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Optional, Tuple, Type, Union

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, model_validator
from pydantic import ValidationError as PydanticValidationError

from zmongo_orgs import config
from zmongo_orgs.errors import ValidationError

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _validate_object_id(value: Any) -> str:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str) and ObjectId.is_valid(value):
        return value
    raise ValueError(f"{value!r} is not a valid ObjectId")


ObjectIdStr = Annotated[str, BeforeValidator(_validate_object_id)]
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _references_to_objectids(doc: Dict[str, Any], references: Dict[str, str]) -> Dict[str, Any]:
    for field in references:
        if doc.get(field) is not None:
            doc[field] = ObjectId(doc[field])
    return doc


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    EDITOR = "EDITOR"
    GUEST = "GUEST"


class MongoModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    # field name -> collection holding the referenced record
    references: ClassVar[Dict[str, str]] = {}

    id: Optional[ObjectIdStr] = Field(default=None, alias="_id")

    def to_document(self) -> Dict[str, Any]:
        """The BSON-ready dict to store: no _id, references as ObjectId."""
        doc = self.model_dump(mode="json", exclude={"id"}, exclude_none=True)
        return _references_to_objectids(doc, self.references)


class PartialUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    references: ClassVar[Dict[str, str]] = {}
    # fields that may be omitted but never explicitly nulled
    required_fields: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "PartialUpdate":
        for name in self.model_fields_set:
            if name in self.required_fields and getattr(self, name) is None:
                raise ValueError(f"'{name}' is required and cannot be set to null")
        return self

    def to_update(self) -> Dict[str, Any]:
        """Only the explicitly supplied fields, ready for $set."""
        doc = self.model_dump(mode="json", exclude_unset=True)
        return _references_to_objectids(doc, self.references)


# ---------- Organization ----------
class Organization(MongoModel):
    name: RequiredStr
    country: RequiredStr


class OrganizationUpdate(PartialUpdate):
    required_fields: ClassVar[Tuple[str, ...]] = ("name", "country")

    name: Optional[RequiredStr] = None
    country: Optional[RequiredStr] = None


# ---------- User ----------
class UserBase(MongoModel):
    name: RequiredStr
    email: str = Field(pattern=EMAIL_PATTERN)
    role: Role = Role.USER


class User(UserBase):
    references: ClassVar[Dict[str, str]] = {"organization": config.ORGANIZATIONS}

    organization: ObjectIdStr


class PopulatedUser(UserBase):
    organization: Organization


class UserUpdate(PartialUpdate):
    references: ClassVar[Dict[str, str]] = {"organization": config.ORGANIZATIONS}
    required_fields: ClassVar[Tuple[str, ...]] = ("name", "email", "role", "organization")

    name: Optional[RequiredStr] = None
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    role: Optional[Role] = None
    organization: Optional[ObjectIdStr] = None


# ---------- Project ----------
class ProjectBase(MongoModel):
    title: RequiredStr
    description: Optional[str] = None


class Project(ProjectBase):
    references: ClassVar[Dict[str, str]] = {"organization": config.ORGANIZATIONS}

    organization: ObjectIdStr


class PopulatedProject(ProjectBase):
    organization: Organization


class ProjectUpdate(PartialUpdate):
    references: ClassVar[Dict[str, str]] = {"organization": config.ORGANIZATIONS}
    required_fields: ClassVar[Tuple[str, ...]] = ("title", "organization")

    title: Optional[RequiredStr] = None
    description: Optional[str] = None
    organization: Optional[ObjectIdStr] = None


# ---------- Reports ----------
class OrganizationUserCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: Optional[ObjectIdStr] = Field(default=None, alias="_id")
    organization_name: Optional[str] = Field(default=None, alias="organizationName")
    total_users: int = Field(alias="totalUsers")


RecordLike = Union[BaseModel, Dict[str, Any]]


def validate(model_cls: Type[BaseModel], record: RecordLike) -> BaseModel:
    """Return ``record`` as a ``model_cls`` instance or raise ValidationError."""
    if isinstance(record, model_cls):
        return record
    if isinstance(record, BaseModel):
        # identity travels separately from a record's fields
        exclude = None if "id" in model_cls.model_fields else {"id"}
        record = record.model_dump(exclude_unset=True, exclude=exclude)
    try:
        return model_cls.model_validate(record)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model_cls.__name__}: {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e
