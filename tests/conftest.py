import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-key"
os.environ["OPENAI_API_KEY"] = ""

import itertools
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.database import Base
from rentflow.core.errors import GatewayError
from rentflow.core.events import build_event_bus
from rentflow.core.settings_store import LocalOverlayStore, SettingsStore
from rentflow.core.storage import StorageClient, get_optional_storage, get_storage
from rentflow.main import app
from rentflow.models.tenant import Tenant


class FakeStorage(StorageClient):
    """In-memory bucket store; ``fail_data`` payloads and ``fail_remove`` simulate outages."""

    def __init__(self):
        super().__init__("https://project.supabase.co", "service-key")
        self.objects = {}
        self.removed = []
        self.fail_data = set()
        self.fail_remove = False
        self._seq = itertools.count(1)

    def upload(self, bucket, path, data, content_type):
        if data in self.fail_data:
            raise GatewayError("Storage error 500: upload rejected")
        if (bucket, path) in self.objects:
            # Same entity, same millisecond
            stem, dot, ext = path.rpartition(".")
            path = f"{stem}-x{next(self._seq)}{dot}{ext}"
        self.objects[(bucket, path)] = data
        return path

    def remove(self, bucket, paths):
        if self.fail_remove:
            raise GatewayError("Storage error 503: unavailable")
        for p in paths:
            self.objects.pop((bucket, p), None)
            self.removed.append((bucket, p))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def settings_store(tmp_path):
    return SettingsStore(LocalOverlayStore(str(tmp_path / "local-settings.json")), row_id=1)


@pytest.fixture
def client(engine, storage, settings_store):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = lambda: User(user_id="user-1", email="owner@example.com")
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_optional_storage] = lambda: storage
    app.state.settings_store = settings_store
    app.state.event_bus = build_event_bus()

    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_tenant(db):
    def _make(name="Alice", property="Flat 1A", rent="1000", join_date=date(2024, 1, 15), **extra):
        tenant = Tenant(
            name=name,
            email=f"{name.lower()}@example.com",
            property=property,
            rent=Decimal(rent),
            join_date=join_date,
            status=extra.pop("status", "Active"),
            avatar=extra.pop("avatar", "https://placehold.co/80x80.png"),
            documents=extra.pop("documents", []),
            **extra,
        )
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    return _make
