from __future__ import annotations

import pytest

from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from tests.fakes import FakeGateway


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def task_service(gateway: FakeGateway) -> TaskService:
    return TaskService(gateway)


@pytest.fixture
def user_service(gateway: FakeGateway) -> UserService:
    return UserService(gateway, RoleCatalog())
