# zmongo_orgs/demo.py
"""
End-to-end walkthrough against a live MongoDB.

    python -m zmongo_orgs.demo

Clears the organizations, users and projects collections, seeds them and
exercises CRUD, population and the users-per-organization aggregation.
Failures are logged here and nowhere below.
"""
import asyncio
import logging
from typing import Any, List, Optional

from zmongo_orgs import config, seed
from zmongo_orgs.errors import ZMongoError
from zmongo_orgs.models import OrganizationUserCount, Project
from zmongo_orgs.organization_service import OrganizationService
from zmongo_orgs.project_service import ProjectService
from zmongo_orgs.reports import users_per_organization
from zmongo_orgs.safe_result import SafeResult
from zmongo_orgs.user_service import UserService
from zmongo_orgs.zmongo import ZMongo

logger = logging.getLogger("zmongo_orgs.demo")


def show(label: str, result: SafeResult) -> Any:
    """Print a result and return its data; raise the typed error on failure."""
    if not result.success:
        return result.unwrap()
    print(f"{label}: {result.to_json(indent=2)}")
    return result.data


def print_table(rows: List[OrganizationUserCount]) -> None:
    print(f"{'organizationName':<20} {'totalUsers':>10}")
    for row in rows:
        print(f"{row.organization_name or '(missing)':<20} {row.total_users:>10}")


async def clear(*services) -> None:
    logger.info("Cleaning database...")
    for service in services:
        (await service.delete_all()).unwrap()


async def project_walkthrough(projects: ProjectService, initech_id: str, umbrella_id: str) -> None:
    created: Project = show("Created project", await projects.create(
        {"title": "Hola", "description": "Que", "organization": initech_id}
    ))
    show("Project by id", await projects.get_by_id(created.id))
    show("Updated project", await projects.update(created.id, {"title": "newHola"}))
    show("Deleted project", await projects.delete(created.id))
    show("Projects after delete (empty)", await projects.list_all())

    for record in seed.projects_for(initech_id, umbrella_id):
        show("Created project", await projects.create(record))
    show("All projects", await projects.list_all())


async def user_walkthrough(users: UserService, initech_id: str, umbrella_id: str) -> None:
    seeded = show("Seeded users", await users.insert_many(seed.users_for(initech_id, umbrella_id)))

    print("\nCRUD DEMO:")
    first = show("User by id", await users.get_by_id(seeded[0].id))
    print(f"User: {first.name}")
    show("User by name", await users.find_one({"name": "Bill"}))
    show("Name and email only", await users.find_one({"name": "Bill"}, fields=["name", "email"]))

    print("\nPOPULATE:")
    bill = show("Bill with organization", await users.find_one({"name": "Bill"}, populate=True))
    print(f"Works at: {bill.organization.name} ({bill.organization.country})")


async def run_demo(zmongo: Optional[ZMongo] = None) -> None:
    async with (zmongo or ZMongo()) as zm:
        show("Connected to MongoDB", await zm.ping())

        organizations = OrganizationService(zm)
        users = UserService(zm)
        projects = ProjectService(zm)

        await clear(users, organizations, projects)
        show("Ensured indexes", await users.ensure_indexes())

        logger.info("Seeding data...")
        initech, umbrella = show("Seeded organizations", await organizations.insert_many(seed.ORGANIZATIONS))

        await project_walkthrough(projects, initech.id, umbrella.id)
        await user_walkthrough(users, initech.id, umbrella.id)

        print("\nAGGREGATION:")
        print_table(show("Users per organization", await users_per_organization(zm)))


def main() -> int:
    config.configure_logging()
    try:
        asyncio.run(run_demo())
    except ZMongoError as e:
        logger.error(f"Demo aborted: {e}")
        return 1
    finally:
        logger.info("Disconnected")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
