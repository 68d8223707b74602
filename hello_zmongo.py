# hello_zmongo.py
import asyncio

from zmongo_orgs import OrganizationService, ProjectService, ZMongo


async def main():
    async with ZMongo() as mongo:
        organizations = OrganizationService(mongo)
        projects = ProjectService(mongo)

        # Insert an organization and a project that references it
        org = (await organizations.create({"name": "Initech", "country": "USA"})).unwrap()
        project = (await projects.create({"title": "Hola", "description": "Que", "organization": org.id})).unwrap()

        # Retrieve the project with its organization joined in
        result = await projects.get_by_id(project.id)
        print(result)
        return result.data


doc = asyncio.run(main())
print(doc)
