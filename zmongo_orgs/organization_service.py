# zmongo_orgs/organization_service.py
from zmongo_orgs import config
from zmongo_orgs.entity_service import EntityService
from zmongo_orgs.models import Organization, OrganizationUpdate


class OrganizationService(EntityService):
    """Organizations hold no references; deleting one does not touch users or projects."""

    collection = config.ORGANIZATIONS
    model = Organization
    update_model = OrganizationUpdate
