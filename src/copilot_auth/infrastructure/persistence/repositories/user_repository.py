"""Repository for user operations."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.domain.entities import OrganizationMembership, PlatformRole, User, UserStatus
from copilot_auth.infrastructure.persistence.database import as_utc
from copilot_auth.infrastructure.persistence.models import OrganizationMembershipModel, UserModel


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    def _to_entity(self, model: UserModel) -> User:
        """Convert infrastructure model to domain entity."""
        return User(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            name=model.name,
            platform_role=PlatformRole(model.platform_role),
            status=UserStatus(model.status),
            email_verified=model.email_verified,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            last_login_at=as_utc(model.last_login_at),
        )

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID.

        Returns:
            The User if found, None otherwise.
        """
        model = await self._session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email.

        Args:
            email: Normalized email address.

        Returns:
            The User if found, None otherwise.
        """
        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, user: User) -> User:
        """Store a new user.

        Args:
            user: The User entity to store.

        Returns:
            The stored entity.

        Raises:
            IntegrityError: If the email is already taken (on flush).
        """
        model = UserModel(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            name=user.name,
            platform_role=user.platform_role.value,
            status=user.status.value,
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        """Write the mutable fields of a user back to the store.

        Args:
            user: The User entity with updated fields.

        Returns:
            The updated entity.
        """
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id)
            .values(
                password_hash=user.password_hash,
                name=user.name,
                platform_role=user.platform_role.value,
                status=user.status.value,
                email_verified=user.email_verified,
                last_login_at=user.last_login_at,
            )
        )
        await self._session.execute(stmt)
        return user

    async def get_organizations(self, user_id: str) -> list[OrganizationMembership]:
        """List the organizations a user belongs to.

        Args:
            user_id: The user's UUID.

        Returns:
            Memberships ordered by organization ID.
        """
        stmt = (
            select(OrganizationMembershipModel)
            .where(OrganizationMembershipModel.user_id == user_id)
            .order_by(OrganizationMembershipModel.organization_id)
        )
        result = await self._session.execute(stmt)
        return [
            OrganizationMembership(
                user_id=m.user_id,
                organization_id=m.organization_id,
                role=m.role,
            )
            for m in result.scalars().all()
        ]
