"""
公共 fixtures

- 记录: make_record / dept_records / memory_store
- 数据库: 每个测试独立的 SQLite 内存库
- 接口: app / client
"""


import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mallcore.config import AppSettings, DatabaseSettings, LoggingSettings, TreeSettings
from mallcore.orm import Base, SqlAlchemyTreeStore, db_manager
from mallcore.tree import EntityKind, MemoryTreeStore, TreeRecord


@pytest.fixture
def temp_dir(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture
def temp_file(tmp_path):
    """在临时目录下写文件并返回路径: temp_file("conf/app.yaml", "debug: true\\n")"""

    def write(relative: str, content: str = "") -> str:
        target = tmp_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return str(target)

    return write


# ---------- 记录 ----------

@pytest.fixture
def make_record():
    """make_record("2", "1", 1, name="技术部", code="tech")"""

    def make(record_id, parent_id=None, sort_order=0, name=None, **payload):
        if name is None:
            name = f"节点{record_id}"
        return TreeRecord(id=record_id, parent_id=parent_id, sort_order=sort_order, name=name, payload=payload)

    return make


@pytest.fixture
def dept_records(make_record):
    """
    总部(1)
    ├── 财务部(3)
    └── 技术部(2)
        ├── 后端组(4)
        └── 前端组(5)
    """
    rows = [
        ("1", None, 1, "总部"),
        ("2", "1", 2, "技术部"),
        ("3", "1", 1, "财务部"),
        ("4", "2", 1, "后端组"),
        ("5", "2", 2, "前端组"),
    ]
    return [make_record(*row) for row in rows]


@pytest.fixture
def memory_store(dept_records):
    store = MemoryTreeStore()
    for record in dept_records:
        store.insert(EntityKind.DEPARTMENT, record)
    return store


@pytest.fixture
def settings():
    """内存数据库，不写日志文件"""
    return AppSettings(
        database=DatabaseSettings(url="sqlite:///:memory:"),
        logging=LoggingSettings(file_path="", enable_console=False),
        tree=TreeSettings(),
    )


# ---------- 数据库 ----------

@pytest.fixture
def memory_engine():
    # 单连接，内存库在整个测试内保持可见
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_session(memory_engine):
    session = sessionmaker(bind=memory_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_store(db_session):
    return SqlAlchemyTreeStore(db_session)


# ---------- 接口 ----------

@pytest.fixture
def app(settings):
    from mallcore.app import create_app

    application = create_app(settings, configure_logging=False)
    try:
        yield application
    finally:
        db_manager.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
