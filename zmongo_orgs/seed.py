# zmongo_orgs/seed.py
from typing import Any, Dict, List

from zmongo_orgs.models import Role

ORGANIZATIONS: List[Dict[str, Any]] = [
    {"name": "Initech", "country": "USA"},
    {"name": "Umbrella Corp", "country": "UK"},
]


def users_for(initech_id: str, umbrella_id: str) -> List[Dict[str, Any]]:
    return [
        {"name": "Bill", "email": "bill@initech.com", "role": Role.ADMIN, "organization": initech_id},
        {"name": "Peter", "email": "peter@initech.com", "role": Role.USER, "organization": initech_id},
        {"name": "Alice", "email": "alice@umbrella.com", "role": Role.EDITOR, "organization": umbrella_id},
    ]


def projects_for(initech_id: str, umbrella_id: str) -> List[Dict[str, Any]]:
    return [
        {"title": "test", "description": "prueba", "organization": initech_id},
        {"title": "test2", "description": "hola", "organization": umbrella_id},
    ]
