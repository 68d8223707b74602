# zmongo_orgs/user_service.py
from zmongo_orgs import config
from zmongo_orgs.entity_service import EntityService
from zmongo_orgs.models import PopulatedUser, User, UserUpdate
from zmongo_orgs.safe_result import SafeResult


class UserService(EntityService):
    collection = config.USERS
    model = User
    update_model = UserUpdate
    populated_model = PopulatedUser

    async def ensure_indexes(self) -> SafeResult:
        """Unique email per user."""
        return await self.zmongo.create_index(self.collection, "email", unique=True)

    async def find_by_email(self, email: str, *, populate: bool = False) -> SafeResult:
        return await self.find_one({"email": email}, populate=populate)
