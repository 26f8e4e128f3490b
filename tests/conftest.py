"""
Shared fixtures: temporary database, catalog cache and a wired engine.
"""

import json
from datetime import timedelta

import pytest

from fakes import CATALOG, OPERATOR, Clock, FakeDeliveryClient, FakeMessenger
from pedidobot.core.catalog import CatalogLookup
from pedidobot.core.conversation import ConversationEngine
from pedidobot.core.orders import OrderLedger
from pedidobot.db.sessions import SessionStore
from pedidobot.db.sqlite import Database


@pytest.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.init()
    yield database
    await database.close()


@pytest.fixture
def ledger(database):
    return OrderLedger(database)


@pytest.fixture
def sessions(database):
    return SessionStore(database)


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([p.to_dict() for p in CATALOG]), encoding="utf-8")
    return path


@pytest.fixture
def catalog(catalog_path):
    return CatalogLookup(cache_path=catalog_path)


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def delivery():
    return FakeDeliveryClient()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def assets(tmp_path):
    assets_dir = tmp_path / "assets"
    assets_dir.mkdir()
    pdf = assets_dir / "catalogo.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    qr = assets_dir / "qr.jpg"
    qr.write_bytes(b"qr")
    return pdf, qr


@pytest.fixture
def engine(messenger, catalog, delivery, ledger, sessions, clock, assets, tmp_path):
    pdf, qr = assets
    return ConversationEngine(
        messenger=messenger,
        catalog=catalog,
        delivery=delivery,
        ledger=ledger,
        sessions=sessions,
        operator_id=OPERATOR,
        session_timeout=timedelta(minutes=30),
        farewell_enabled=False,
        media_dir=tmp_path / "media",
        catalog_pdf_path=pdf,
        qr_image_path=qr,
        clock=clock,
    )
