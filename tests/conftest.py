import os

# 在导入应用之前指定测试数据库，避免创建本地数据库文件
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio.models import project as _project_models  # noqa: F401  注册 ORM 表
from portfolio.models.database import Base, get_db
from portfolio.service.errors import PersistenceError
from portfolio.service.gallery import Wishlist
from portfolio.service.persistence import PortfolioStore


class MemoryStore(PortfolioStore):
    """内存存储，记录每次调用，可按方法名注入失败"""

    def __init__(self):
        self.projects = {}
        self.tags = {}
        self.links = []
        self.calls = []
        self.fail_on = set()
        self._next_id = 1

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise PersistenceError(f"{name} failed")

    def _new_id(self):
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def get_project(self, project_id):
        self._call("get_project")
        record = self.projects.get(project_id)
        return dict(record) if record else None

    def list_projects(self):
        self._call("list_projects")
        return sorted(
            (dict(record) for record in self.projects.values()),
            key=lambda record: (record["order_index"], record["id"]),
            reverse=True,
        )

    def insert_project(self, document):
        self._call("insert_project")
        project_id = self._new_id()
        self.projects[project_id] = {"id": project_id, **document}
        return project_id

    def replace_project(self, project_id, document):
        self._call("replace_project")
        if project_id not in self.projects:
            return False
        self.projects[project_id] = {"id": project_id, **document}
        return True

    def delete_project(self, project_id):
        self._call("delete_project")
        return self.projects.pop(project_id, None) is not None

    def get_project_tags(self, project_id):
        self._call("get_project_tags")
        if project_id not in self.projects:
            return []
        tag_ids = sorted(tag_id for pid, tag_id in self.links if pid == project_id)
        return [dict(self.tags[tag_id]) for tag_id in tag_ids if tag_id in self.tags]

    def get_tags_for_projects(self, project_ids):
        self._call("get_tags_for_projects")
        wanted = set(project_ids)
        result = {}
        for project_id, tag_id in sorted(self.links):
            if project_id in wanted and tag_id in self.tags:
                result.setdefault(project_id, []).append(dict(self.tags[tag_id]))
        return result

    def replace_project_tags(self, project_id, tag_ids):
        self._call("replace_project_tags")
        self.links = [link for link in self.links if link[0] != project_id]
        self.links.extend((project_id, tag_id) for tag_id in dict.fromkeys(tag_ids))

    def list_tags(self):
        self._call("list_tags")
        return [dict(tag) for tag in sorted(self.tags.values(), key=lambda tag: tag["id"], reverse=True)]

    def get_tag(self, tag_id):
        self._call("get_tag")
        tag = self.tags.get(tag_id)
        return dict(tag) if tag else None

    def insert_tag(self, label, hex_color):
        self._call("insert_tag")
        tag_id = self._new_id()
        self.tags[tag_id] = {"id": tag_id, "label": label, "hex_color": hex_color, "created_at": None}
        return dict(self.tags[tag_id])

    def update_tag(self, tag_id, changes):
        self._call("update_tag")
        if tag_id not in self.tags:
            return None
        self.tags[tag_id].update(changes)
        return dict(self.tags[tag_id])

    def delete_tag(self, tag_id):
        self._call("delete_tag")
        return self.tags.pop(tag_id, None) is not None


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, tmp_path):
    from portfolio.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.wishlist = Wishlist(str(tmp_path / "wishlist.json")).load()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.state.wishlist = None
