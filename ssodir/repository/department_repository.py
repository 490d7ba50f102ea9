"""部门闭包仓储

DepartmentClosure 是权限判定所依赖的窄接口；
DepartmentClosureRepository 基于 SQLAlchemy 闭包表实现。

使用示例:
    from ssodir.config import DatabaseSettings
    from ssodir.repository import DepartmentClosureRepository

    repository = DepartmentClosureRepository.from_settings(DatabaseSettings(url="sqlite:///directory.db"))
    repository.are_all_descendants_of(["d-11", "d-12"], ["d-1"])
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from ssodir.config import DatabaseSettings
from ssodir.log import get_logger
from .models import DirectoryBase, DepartmentTreePath, DepartmentPosition

logger = get_logger()


class DepartmentClosure(ABC):
    """部门闭包查询接口"""

    @abstractmethod
    def are_all_descendants_of(self, candidate_ids: Iterable[str], ancestor_ids: Iterable[str]) -> bool:
        """candidate_ids 中的每个部门是否都是 ancestor_ids 中某个部门本身或其后代"""

    @abstractmethod
    def child_department_ids(self, department_id: str, functional_direction_id: Optional[str] = None) -> List[str]:
        """部门的所有后代部门ID（不含自身）"""

    @abstractmethod
    def personnel_number_in_department(self, department_id: str, user_id: str) -> Optional[DepartmentPosition]:
        """人员在部门（含后代部门）中的岗位记录"""

    @abstractmethod
    def department_positions_counts(
        self,
        department_ids: Iterable[str],
        with_personnel_number_only: bool = True
    ) -> Dict[str, int]:
        """各部门自身的岗位数量"""

    @abstractmethod
    def department_positions_count_with_depth(
        self,
        department_id: str,
        with_personnel_number_only: bool = True
    ) -> int:
        """部门及其全部后代部门的岗位数量"""


class DepartmentClosureRepository(DepartmentClosure):
    """基于 SQLAlchemy 的部门闭包仓储

    每次查询使用独立的会话，仓储本身可在线程间共享。
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @classmethod
    def from_settings(cls, settings: DatabaseSettings, create_tables: bool = False) -> "DepartmentClosureRepository":
        """根据数据库配置创建仓储"""
        if not settings.url:
            raise ValueError("DatabaseSettings.url is required")
        engine = create_engine(settings.url, echo=settings.echo, pool_pre_ping=settings.pool_pre_ping)
        if create_tables:
            DirectoryBase.metadata.create_all(bind=engine)
        return cls(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))

    def are_all_descendants_of(self, candidate_ids: Iterable[str], ancestor_ids: Iterable[str]) -> bool:
        candidates = set(candidate_ids)
        ancestors = set(ancestor_ids)
        if not candidates:
            return True
        if not ancestors:
            return False

        stmt = (
            select(func.count(func.distinct(DepartmentTreePath.descendant_id)))
            .where(DepartmentTreePath.descendant_id.in_(candidates))
            .where(DepartmentTreePath.ancestor_id.in_(ancestors))
        )
        with self.session_factory() as session:
            found = session.execute(stmt).scalar_one()
        logger.debug(f"are_all_descendants_of: {found}/{len(candidates)} candidates covered")
        return found == len(candidates)

    def child_department_ids(self, department_id: str, functional_direction_id: Optional[str] = None) -> List[str]:
        stmt = (
            select(DepartmentTreePath.descendant_id)
            .where(DepartmentTreePath.ancestor_id == department_id)
            .where(DepartmentTreePath.depth > 0)
        )
        if functional_direction_id is not None:
            stmt = stmt.where(DepartmentTreePath.functional_direction_id == functional_direction_id)
        stmt = stmt.order_by(DepartmentTreePath.depth, DepartmentTreePath.descendant_id)

        with self.session_factory() as session:
            return list(session.execute(stmt).scalars())

    def personnel_number_in_department(self, department_id: str, user_id: str) -> Optional[DepartmentPosition]:
        stmt = (
            select(DepartmentPosition)
            .join(DepartmentTreePath, DepartmentTreePath.descendant_id == DepartmentPosition.department_id)
            .where(DepartmentTreePath.ancestor_id == department_id)
            .where(DepartmentPosition.personnel_number_id == user_id)
            .order_by(DepartmentTreePath.depth, DepartmentPosition.id)
            .limit(1)
        )
        with self.session_factory() as session:
            return session.execute(stmt).scalars().first()

    def department_positions_counts(
        self,
        department_ids: Iterable[str],
        with_personnel_number_only: bool = True
    ) -> Dict[str, int]:
        ids = list(dict.fromkeys(department_ids))
        if not ids:
            return {}

        stmt = (
            select(DepartmentPosition.department_id, func.count(DepartmentPosition.id))
            .where(DepartmentPosition.department_id.in_(ids))
            .group_by(DepartmentPosition.department_id)
        )
        if with_personnel_number_only:
            stmt = stmt.where(DepartmentPosition.personnel_number_id.is_not(None))

        with self.session_factory() as session:
            rows = dict(session.execute(stmt).all())
        return {department_id: rows.get(department_id, 0) for department_id in ids}

    def department_positions_count_with_depth(
        self,
        department_id: str,
        with_personnel_number_only: bool = True
    ) -> int:
        stmt = (
            select(func.count(DepartmentPosition.id))
            .join(DepartmentTreePath, DepartmentTreePath.descendant_id == DepartmentPosition.department_id)
            .where(DepartmentTreePath.ancestor_id == department_id)
        )
        if with_personnel_number_only:
            stmt = stmt.where(DepartmentPosition.personnel_number_id.is_not(None))

        with self.session_factory() as session:
            return session.execute(stmt).scalar_one()

    # ==================== 同步辅助 ====================

    def add_department(
        self,
        department_id: str,
        parent_id: Optional[str] = None,
        functional_direction_id: Optional[str] = None,
        session: Optional[Session] = None,
    ) -> None:
        """登记一个部门，父部门必须已登记

        为新部门写入自身记录，并为父部门的每个祖先写入一条路径。
        """
        def _add(s: Session):
            s.add(DepartmentTreePath(
                ancestor_id=department_id,
                descendant_id=department_id,
                depth=0,
                functional_direction_id=functional_direction_id,
            ))
            if parent_id is None:
                return
            parent_paths = s.execute(
                select(DepartmentTreePath).where(DepartmentTreePath.descendant_id == parent_id)
            ).scalars().all()
            if not parent_paths:
                raise ValueError(f"parent department is not registered: {parent_id}")
            for path in parent_paths:
                s.add(DepartmentTreePath(
                    ancestor_id=path.ancestor_id,
                    descendant_id=department_id,
                    depth=path.depth + 1,
                    functional_direction_id=functional_direction_id,
                ))

        if session is not None:
            _add(session)
            return
        with self.session_factory() as s:
            with s.begin():
                _add(s)

    def add_position(
        self,
        department_id: str,
        position_id: str,
        personnel_number_id: Optional[str] = None,
    ) -> None:
        """登记一个部门岗位快照"""
        with self.session_factory() as session:
            with session.begin():
                session.add(DepartmentPosition(
                    department_id=department_id,
                    position_id=position_id,
                    personnel_number_id=personnel_number_id,
                ))


__all__ = [
    "DepartmentClosure",
    "DepartmentClosureRepository",
]
