# zmongo_orgs/project_service.py
"""
CRUD for projects.

get_by_id joins the owning Organization into the result (PopulatedProject);
list_all returns stored Projects with ``organization`` left as an id, keeping
bulk reads to a single query.
"""
from zmongo_orgs import config
from zmongo_orgs.entity_service import EntityService
from zmongo_orgs.models import PopulatedProject, Project, ProjectUpdate


class ProjectService(EntityService):
    collection = config.PROJECTS
    model = Project
    update_model = ProjectUpdate
    populated_model = PopulatedProject
