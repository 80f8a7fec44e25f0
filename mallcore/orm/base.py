"""模型基类

- Base: 声明基类
- CoreModel: 字符串 UUID 主键、创建/更新时间、表名自动生成
"""

import re
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def to_snake_case(name: str) -> str:
    """驼峰命名转下划线: ProductCategory -> product_category"""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.lower()


def generate_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class CoreModel(Base):
    """核心模型基类

    包含字段:
        - id: 主键（UUID 字符串，创建后不可变）
        - created_at: 创建时间
        - updated_at: 更新时间

    使用示例:
        class Department(CoreModel):
            # __tablename__ 自动生成为 "department"
            name: Mapped[str] = mapped_column(String(100))
    """
    __abstract__ = True

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return to_snake_case(cls.__name__)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id, comment="主键")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        default=datetime.now,
        comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=datetime.now,
        comment="更新时间"
    )

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"
