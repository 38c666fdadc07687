"""Repository for province and administrative unit persistence."""

from datetime import UTC, datetime

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vn_admin.core.errors import PersistenceError
from vn_admin.core.schema import AdminUnit, Province
from vn_admin.db.models import AdminUnitDB, ProvinceDB

DEFAULT_SEARCH_LIMIT = 50


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class AdminRepository:
    """
    Store for provinces and their administrative units.

    Every write is an upsert keyed by the remote id and is committed on its
    own, so a failed write never rolls back earlier ones.
    """

    def __init__(self, session: Session):
        self.session = session

    def upsert_province(self, province: Province) -> Province:
        """
        Insert or update a province.

        Args:
            province: The Province to write.

        Returns:
            The stored Province, with ``updated_at`` set.

        Raises:
            PersistenceError: If the database rejects the write.
        """
        code = str(province.code) if province.code is not None else None
        try:
            db_province = self.session.get(ProvinceDB, province.id)
            if db_province is None:
                db_province = ProvinceDB(id=province.id)
                self.session.add(db_province)
            db_province.name = province.name
            db_province.code = code
            db_province.updated_at = _utc_now()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"failed to upsert province {province.id}: {e}") from e
        return self._province_to_domain(db_province)

    def upsert_unit(self, unit: AdminUnit) -> AdminUnit:
        """
        Insert or update an administrative unit.

        Args:
            unit: The AdminUnit to write. Its province must already exist.

        Returns:
            The stored AdminUnit, with ``updated_at`` set.

        Raises:
            PersistenceError: If the province is unknown or the database
                rejects the write.
        """
        try:
            if self.session.get(ProvinceDB, unit.province_id) is None:
                self.session.rollback()
                raise PersistenceError(
                    f"failed to upsert unit {unit.id}: province {unit.province_id} does not exist"
                )
            db_unit = self.session.get(AdminUnitDB, unit.id)
            if db_unit is None:
                db_unit = AdminUnitDB(id=unit.id)
                self.session.add(db_unit)
            db_unit.province_id = unit.province_id
            db_unit.name = unit.name
            db_unit.level = unit.level
            db_unit.code = unit.code
            db_unit.pre_merger_desc = unit.pre_merger_description
            db_unit.lat = unit.latitude
            db_unit.long = unit.longitude
            db_unit.updated_at = _utc_now()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"failed to upsert unit {unit.id}: {e}") from e
        return self._unit_to_domain(db_unit)

    def list_provinces(self) -> list[Province]:
        """List all provinces ordered by id."""
        stmt = select(ProvinceDB).order_by(ProvinceDB.id)
        try:
            result = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to list provinces: {e}") from e
        return [self._province_to_domain(p) for p in result]

    def list_units_by_province(self, province_id: int) -> list[AdminUnit]:
        """List the units of one province ordered by id."""
        stmt = (
            select(AdminUnitDB)
            .where(AdminUnitDB.province_id == province_id)
            .order_by(AdminUnitDB.id)
        )
        try:
            result = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to list units for province {province_id}: {e}") from e
        return [self._unit_to_domain(u) for u in result]

    def search_units(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[AdminUnit]:
        """
        Search units whose name or pre-merger description contains a substring.

        Args:
            query: Case-insensitive substring.
            limit: Maximum number of results.

        Returns:
            Matching units ordered by id.
        """
        pattern = f"%{query}%"
        stmt = (
            select(AdminUnitDB)
            .where(
                or_(
                    AdminUnitDB.name.ilike(pattern),
                    AdminUnitDB.pre_merger_desc.ilike(pattern),
                )
            )
            .order_by(AdminUnitDB.id)
            .limit(limit)
        )
        try:
            result = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to search units for {query!r}: {e}") from e
        return [self._unit_to_domain(u) for u in result]

    def count_provinces(self) -> int:
        """Count stored provinces."""
        return self.session.execute(select(func.count()).select_from(ProvinceDB)).scalar_one()

    def count_units(self) -> int:
        """Count stored units."""
        return self.session.execute(select(func.count()).select_from(AdminUnitDB)).scalar_one()

    def ping(self) -> None:
        """
        Check that the database answers.

        Raises:
            PersistenceError: If the database is unreachable.
        """
        try:
            self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise PersistenceError(f"database ping failed: {e}") from e

    def _province_to_domain(self, db_province: ProvinceDB) -> Province:
        """Convert DB model to domain model."""
        return Province(
            id=db_province.id,
            name=db_province.name,
            code=db_province.code,
            updated_at=db_province.updated_at,
        )

    def _unit_to_domain(self, db_unit: AdminUnitDB) -> AdminUnit:
        """Convert DB model to domain model."""
        return AdminUnit(
            id=db_unit.id,
            province_id=db_unit.province_id,
            name=db_unit.name,
            level=db_unit.level,
            code=db_unit.code,
            pre_merger_description=db_unit.pre_merger_desc,
            latitude=db_unit.lat,
            longitude=db_unit.long,
            updated_at=db_unit.updated_at,
        )
