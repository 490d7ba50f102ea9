"""测试公共配置

提供内存数据库、部门闭包仓储和标准组织场景的 fixtures。

标准场景:
    A (负责人 boss)
    ├── C (U1)
    └── B (空缺)
        └── D (U2)
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ssodir.config import DirectorySettings
from ssodir.directory import DirectoryService, OperationContext
from ssodir.repository import DirectoryBase, DepartmentClosureRepository
from tests.helpers import FakeGateway, make_user, make_position, make_department, held


@pytest.fixture(scope="function")
def memory_engine():
    """创建内存数据库引擎

    使用 StaticPool 确保所有操作使用同一个连接，
    避免 SQLite 内存数据库不同连接看不到数据的问题。
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DirectoryBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(memory_engine):
    return sessionmaker(bind=memory_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def closure_repository(session_factory):
    """带部门树的闭包仓储

    d-1
    ├── d-11
    │   └── d-111
    └── d-12
    d-2
    """
    repository = DepartmentClosureRepository(session_factory)
    repository.add_department("d-1")
    repository.add_department("d-11", parent_id="d-1", functional_direction_id="fd-prod")
    repository.add_department("d-111", parent_id="d-11", functional_direction_id="fd-prod")
    repository.add_department("d-12", parent_id="d-1", functional_direction_id="fd-sales")
    repository.add_department("d-2")
    return repository


@pytest.fixture
def scenario():
    """标准组织场景的实体"""
    u1 = make_user("u-1")
    u2 = make_user("u-2")
    department = make_department("d-1", name="Цех №1", manager_id="A")
    a = make_position("A", name="Начальник цеха", department=department)
    b = make_position("B", name="Мастер")
    c = make_position("C", incumbents=[u1])
    d = make_position("D", incumbents=[u2])
    boss = make_user("u-boss", positions=[held(a)])
    return {"A": a, "B": b, "C": c, "D": d, "u1": u1, "u2": u2, "boss": boss, "department": department}


@pytest.fixture
def scenario_gateway(scenario):
    """标准场景网关：A 的直接下属按 [C, B] 返回"""
    return FakeGateway(
        subordinates={
            "A": [scenario["C"], scenario["B"]],
            "B": [scenario["D"]],
        },
        positions=[scenario[key] for key in ("A", "B", "C", "D")],
        personnel=[scenario["u1"], scenario["u2"], scenario["boss"]],
        departments=[scenario["department"]],
        tokens={"token-boss": scenario["boss"]},
    )


@pytest.fixture
def directory_settings():
    return DirectorySettings()


@pytest.fixture
def service(scenario_gateway, closure_repository, directory_settings):
    return DirectoryService(scenario_gateway, closure_repository=closure_repository, settings=directory_settings)


@pytest.fixture
def boss_context(scenario):
    return OperationContext.for_user(scenario["boss"])
