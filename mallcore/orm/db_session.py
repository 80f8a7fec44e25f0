"""
数据库连接与会话

- init_database(): 按 DatabaseSettings 创建引擎并建表
- get_db(): FastAPI 依赖，一个请求一个 Session，正常结束提交，异常回滚
- db_session_scope(): 脚本、测试等非请求场景使用
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mallcore.log import get_logger

from .base import Base

_logger = get_logger("mallcore.orm.session")

_NOT_INITIALIZED = "数据库未初始化，请先调用 init_database()"

# 可由 config 对象提供的连接参数
_CONFIG_KEYS = ("echo", "pool_size", "max_overflow", "pool_recycle", "pool_pre_ping")


def engine_options(database_url: str, **options: Any) -> Dict[str, Any]:
    """create_engine 参数

    SQLite 不使用连接池参数；内存库使用单连接 StaticPool，保证所有 Session 看到同一个库。
    """
    kwargs: Dict[str, Any] = {"echo": options.get("echo", False)}
    if not database_url.startswith("sqlite"):
        for key in ("pool_size", "max_overflow", "pool_recycle", "pool_pre_ping"):
            if key in options:
                kwargs[key] = options[key]
        return kwargs

    kwargs["connect_args"] = {"check_same_thread": False}
    if database_url.partition("://")[2].lstrip("/") in ("", ":memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = options.get("pool_pre_ping", True)
    return kwargs


class DatabaseManager:
    """持有进程内唯一的引擎和 sessionmaker

    使用示例:
        from mallcore.orm import db_manager

        db_manager.init(database_url="sqlite:///./mall.db")
        with db_session_scope() as session:
            ...
    """

    def __init__(self):
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._session_factory is not None

    def init(
        self,
        database_url: str = None,
        config: Any = None,
        create_tables: bool = True,
        logger: logging.Logger = None,
        **options: Any,
    ) -> Tuple[Engine, sessionmaker]:
        """创建引擎

        Args:
            database_url: 连接 URL，提供 config 时以 config.url 为准
            config: DatabaseSettings
            create_tables: 是否按模型元数据建表
            **options: echo / pool_size / max_overflow / pool_recycle / pool_pre_ping

        Raises:
            ValueError: 没有可用的连接 URL
        """
        log = logger or _logger
        if config is not None:
            database_url = getattr(config, "url", None) or database_url
            options.update({key: getattr(config, key) for key in _CONFIG_KEYS if hasattr(config, key)})
        if not database_url:
            raise ValueError("缺少 database_url，请通过参数或 config 提供")

        self.dispose()
        self._engine = create_engine(database_url, **engine_options(database_url, **options))
        self._session_factory = sessionmaker(bind=self._engine, autoflush=True)
        log.info(f"数据库引擎已创建: {self._engine.url.render_as_string(hide_password=True)}")

        if create_tables:
            Base.metadata.create_all(self._engine)
            log.info(f"已建表: {len(Base.metadata.tables)} 张")
        return self._engine, self._session_factory

    def get_session(self) -> Session:
        """新建 Session，由调用方关闭"""
        if self._session_factory is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._session_factory()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


db_manager = DatabaseManager()


def init_database(database_url: str = None, config: Any = None, **kwargs):
    return db_manager.init(database_url=database_url, config=config, **kwargs)


def get_engine() -> Engine:
    return db_manager.engine


@contextmanager
def db_session_scope(auto_commit: bool = True) -> Generator[Session, None, None]:
    """
    使用示例:
        with db_session_scope() as session:
            session.add(Department(name="总部"))
    """
    session = db_manager.get_session()
    try:
        yield session
        if auto_commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    使用示例:
        @router.get("/tree")
        def get_tree(db: Session = Depends(get_db)):
            ...
    """
    with db_session_scope() as session:
        yield session


__all__ = [
    "DatabaseManager",
    "db_manager",
    "engine_options",
    "init_database",
    "get_engine",
    "get_db",
    "db_session_scope",
]
