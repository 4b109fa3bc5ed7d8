"""Fixtures for role store integration tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rolestore.domain.services import RoleStore
from rolestore.infrastructure.persistence.models import (
    GroupModel,
    PolicyRoleRefModel,
    ServiceModel,
    UserModel,
)
from rolestore.infrastructure.persistence.repositories import (
    GroupRepository,
    ServiceRepository,
    UserRepository,
)
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork


class Seeder:
    """Commits reference data outside of any role store unit of work."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def add(self, *models):
        async with self.session_factory() as session:
            session.add_all(models)
            await session.commit()
        return models[0] if len(models) == 1 else models

    async def users(self, *names: str) -> None:
        await self.add(*[UserModel(name=name) for name in names])

    async def groups(self, *names: str) -> None:
        await self.add(*[GroupModel(name=name) for name in names])

    async def membership(self, user_name: str, group_name: str) -> None:
        async with self.session_factory() as session:
            user = await UserRepository(session).get_by_name(user_name)
            groups = GroupRepository(session)
            group = await groups.get_by_name(group_name)
            await groups.add_user(group.id, user.id)
            await session.commit()

    async def service(self, name: str, service_type: str, **configs) -> ServiceModel:
        async with self.session_factory() as session:
            service = await ServiceRepository(session).create(
                ServiceModel(name=name, type=service_type, configs=configs)
            )
            await session.commit()
            return service

    async def policy_ref(
        self, service: ServiceModel, role_name: str, policy_name: str = "etl-policy"
    ) -> None:
        await self.add(
            PolicyRoleRefModel(
                policy_id=1,
                policy_name=policy_name,
                service_id=service.id,
                role_name=role_name,
            )
        )


@pytest_asyncio.fixture
async def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest_asyncio.fixture
async def run_store(session_factory, settings):
    """Run a RoleStore operation in its own committed unit of work."""

    async def run(operation, store_settings=None):
        async with UnitOfWork(session_factory) as uow:
            return await operation(RoleStore(uow, settings=store_settings or settings))

    return run
