# zmongo_orgs/reports.py
from typing import Any, Dict, Iterable, List

from zmongo_orgs import config
from zmongo_orgs.errors import ZMongoError
from zmongo_orgs.models import OrganizationUserCount, Role, validate
from zmongo_orgs.safe_result import SafeResult
from zmongo_orgs.zmongo import ZMongo


def users_per_organization_pipeline(exclude_roles: Iterable[Role] = (Role.GUEST,)) -> List[Dict[str, Any]]:
    """Group users by organization, count them and join in the organization name."""
    return [
        {"$match": {"role": {"$nin": [Role(role).value for role in exclude_roles]}}},
        {"$group": {"_id": "$organization", "totalUsers": {"$sum": 1}}},
        {"$lookup": {
            "from": config.ORGANIZATIONS,
            "localField": "_id",
            "foreignField": "_id",
            "as": "orgInfo",
        }},
        {"$project": {
            "organizationName": {"$arrayElemAt": ["$orgInfo.name", 0]},
            "totalUsers": 1,
        }},
        {"$sort": {"organizationName": 1}},
    ]


async def users_per_organization(
    zmongo: ZMongo,
    exclude_roles: Iterable[Role] = (Role.GUEST,),
) -> SafeResult:
    """
    SafeResult of OrganizationUserCount rows, one per referenced organization.

    A group whose organization no longer exists keeps its count with
    ``organization_name`` set to None.
    """
    try:
        rows = (await zmongo.aggregate(config.USERS, users_per_organization_pipeline(exclude_roles))).unwrap()
        return SafeResult.ok([validate(OrganizationUserCount, row) for row in rows])
    except ZMongoError as e:
        return SafeResult.from_exception(e)
