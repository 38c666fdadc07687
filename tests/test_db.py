"""Tests for the database persistence layer."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from vn_admin.core.errors import PersistenceError
from vn_admin.core.schema import AdminUnit, Province
from vn_admin.db.engine import create_db_engine
from vn_admin.db.models import AdminUnitDB, Base, ProvinceDB
from vn_admin.db.repositories import AdminRepository


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def engine(temp_db_path):
    """Create a test database engine."""
    engine = create_db_engine(f"sqlite:///{temp_db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def repo(session: Session) -> AdminRepository:
    """Repository bound to the test session."""
    return AdminRepository(session)


def _unit(unit_id: int, province_id: int = 1, **kwargs) -> AdminUnit:
    defaults = {
        "name": f"Unit {unit_id}",
        "level": "xã",
        "code": f"{unit_id:05d}",
    }
    defaults.update(kwargs)
    return AdminUnit(id=unit_id, province_id=province_id, **defaults)


class TestProvinceUpsert:
    """Tests for province upserts."""

    def test_insert(self, repo: AdminRepository) -> None:
        """Test inserting a new province."""
        saved = repo.upsert_province(Province(id=1, name="Hà Nội", code=1))
        assert saved.id == 1
        assert saved.name == "Hà Nội"
        assert saved.code == 1
        assert saved.updated_at is not None

    def test_upsert_overwrites(self, repo: AdminRepository, session: Session) -> None:
        """Test that a second upsert updates the row instead of inserting."""
        first = repo.upsert_province(Province(id=1, name="A", code=1))
        second = repo.upsert_province(Province(id=1, name="A2", code=2))

        count = session.execute(select(func.count()).select_from(ProvinceDB)).scalar_one()
        assert count == 1
        assert second.name == "A2"
        assert second.code == 2
        assert second.updated_at >= first.updated_at

    def test_code_none_round_trip(self, repo: AdminRepository) -> None:
        """Test that an absent code stays absent."""
        repo.upsert_province(Province(id=5, name="No code"))
        assert repo.list_provinces()[0].code is None

    def test_list_ordered_by_id(self, repo: AdminRepository) -> None:
        """Test that provinces are listed by id."""
        for pid in (3, 1, 2):
            repo.upsert_province(Province(id=pid, name=f"P{pid}"))
        assert [p.id for p in repo.list_provinces()] == [1, 2, 3]

    def test_list_empty(self, repo: AdminRepository) -> None:
        """Test listing with no provinces."""
        assert repo.list_provinces() == []


class TestUnitUpsert:
    """Tests for administrative unit upserts."""

    @pytest.fixture(autouse=True)
    def provinces(self, repo: AdminRepository) -> None:
        """Two provinces for units to belong to."""
        repo.upsert_province(Province(id=1, name="A"))
        repo.upsert_province(Province(id=2, name="B"))

    def test_insert(self, repo: AdminRepository) -> None:
        """Test inserting a unit with all fields."""
        saved = repo.upsert_unit(
            _unit(10, pre_merger_description="Xã Cũ", latitude=21.5, longitude=105.25)
        )
        assert saved.id == 10
        assert saved.code == "00010"
        assert saved.pre_merger_description == "Xã Cũ"
        assert saved.latitude == 21.5
        assert saved.longitude == 105.25
        assert saved.updated_at is not None

    def test_upsert_overwrites(self, repo: AdminRepository, session: Session) -> None:
        """Test that re-upserting a unit updates it in place."""
        repo.upsert_unit(_unit(10, name="Old"))
        repo.upsert_unit(_unit(10, name="New", province_id=2))

        count = session.execute(select(func.count()).select_from(AdminUnitDB)).scalar_one()
        assert count == 1
        assert repo.list_units_by_province(1) == []
        moved = repo.list_units_by_province(2)
        assert [u.name for u in moved] == ["New"]

    def test_unknown_province_rejected(self, repo: AdminRepository) -> None:
        """Test that a unit must reference an existing province."""
        with pytest.raises(PersistenceError, match="province 99 does not exist"):
            repo.upsert_unit(_unit(10, province_id=99))

    def test_unknown_province_ends_transaction(
        self, repo: AdminRepository, session: Session
    ) -> None:
        """Test that a rejected unit leaves no transaction open."""
        with pytest.raises(PersistenceError):
            repo.upsert_unit(_unit(10, province_id=99))
        assert not session.in_transaction()

    def test_failed_write_keeps_earlier_rows(self, repo: AdminRepository) -> None:
        """Test that a rejected unit does not undo earlier upserts."""
        repo.upsert_unit(_unit(10))
        with pytest.raises(PersistenceError):
            repo.upsert_unit(_unit(11, province_id=99))
        repo.upsert_unit(_unit(12))

        assert [u.id for u in repo.list_units_by_province(1)] == [10, 12]

    def test_list_by_province(self, repo: AdminRepository) -> None:
        """Test that only the requested province's units are listed, by id."""
        repo.upsert_unit(_unit(12, province_id=1))
        repo.upsert_unit(_unit(10, province_id=1))
        repo.upsert_unit(_unit(11, province_id=2))

        assert [u.id for u in repo.list_units_by_province(1)] == [10, 12]
        assert [u.id for u in repo.list_units_by_province(2)] == [11]
        assert repo.list_units_by_province(3) == []


class TestSearch:
    """Tests for unit search."""

    @pytest.fixture(autouse=True)
    def units(self, repo: AdminRepository) -> None:
        """A few units to search."""
        repo.upsert_province(Province(id=1, name="A"))
        repo.upsert_unit(_unit(1, name="Phuong Ba Dinh", pre_merger_description="Quan Thanh"))
        repo.upsert_unit(_unit(2, name="Xa Dong Anh", pre_merger_description="Thi tran Dong Anh"))
        repo.upsert_unit(_unit(3, name="Phuong Hoan Kiem"))

    def test_search_by_name(self, repo: AdminRepository) -> None:
        """Test substring match on the name."""
        assert [u.id for u in repo.search_units("Phuong")] == [1, 3]

    def test_search_case_insensitive(self, repo: AdminRepository) -> None:
        """Test that search ignores case."""
        assert [u.id for u in repo.search_units("hoan kiem")] == [3]

    def test_search_pre_merger_description(self, repo: AdminRepository) -> None:
        """Test that the pre-merger description is searched too."""
        assert [u.id for u in repo.search_units("quan thanh")] == [1]

    def test_search_limit(self, repo: AdminRepository) -> None:
        """Test that the result count is capped."""
        assert len(repo.search_units("a", limit=2)) == 2

    def test_search_no_match(self, repo: AdminRepository) -> None:
        """Test search with no match."""
        assert repo.search_units("zzz") == []


class TestHousekeeping:
    """Tests for ping and counters."""

    def test_ping(self, repo: AdminRepository) -> None:
        """Test that ping succeeds on a live database."""
        repo.ping()

    def test_counts(self, repo: AdminRepository) -> None:
        """Test province and unit counters."""
        repo.upsert_province(Province(id=1, name="A"))
        repo.upsert_unit(_unit(1))
        repo.upsert_unit(_unit(2))
        assert repo.count_provinces() == 1
        assert repo.count_units() == 2
