"""部门闭包表模型

目录数据本身不落库，这里只保存本地同步的部门祖先/后代关系和部门岗位快照，
供"部门是否在管理范围内""部门岗位数量"等查询使用。

闭包表约定：
    - 每个部门都有一行 depth=0 的自身记录
    - ancestor_id 到 descendant_id 的每条路径一行，depth 为层级差
"""

from typing import Optional

from sqlalchemy import String, Integer, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class DirectoryBase(DeclarativeBase):
    """目录表模型基类"""
    pass


class DepartmentTreePath(DirectoryBase):
    """部门闭包表"""
    __tablename__ = "department_tree_path"

    ancestor_id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="祖先部门ID")
    descendant_id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="后代部门ID")
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="层级差")
    functional_direction_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, default=None, comment="后代部门的职能方向ID"
    )

    __table_args__ = (
        Index("ix_department_tree_path_descendant", "descendant_id"),
    )

    def __repr__(self) -> str:
        return f"<DepartmentTreePath {self.ancestor_id}->{self.descendant_id} depth={self.depth}>"


class DepartmentPosition(DirectoryBase):
    """部门岗位快照"""
    __tablename__ = "department_position"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    department_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True, comment="部门ID")
    position_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="岗位ID")
    personnel_number_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, default=None, index=True, comment="在岗人员ID，空缺为 NULL"
    )

    def __repr__(self) -> str:
        return f"<DepartmentPosition {self.department_id}/{self.position_id}>"


__all__ = [
    "DirectoryBase",
    "DepartmentTreePath",
    "DepartmentPosition",
]
