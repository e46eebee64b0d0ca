"""Persistence layer for mortgages, their terms history and payments.

It defaults to SQLite for local development, but accepts any
SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL). Reads return frozen
dataclasses from :mod:`mortgage_sim.data_models`, loaded in one transaction
so a simulation always works on a consistent view of a mortgage's history.
Terms snapshots are append-only; the only way to remove them is a full purge
of the mortgage.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from loguru import logger
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .data_models import Mortgage, Payment, TermsSnapshot
from .errors import DuplicateMortgage, DuplicateTerms, NotFound

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MortgageModel(Base):
    __tablename__ = "mortgages"

    id = Column(String(64), primary_key=True)
    title = Column(String(80), nullable=False)
    holder = Column(String(60), nullable=False, default="")
    kind = Column(String(40), nullable=False, default="")
    principal = Column(Numeric(14, 2), nullable=False)
    origination_period = Column(String(7), nullable=False)
    term_months = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class TermsSnapshotModel(Base):
    __tablename__ = "terms_snapshots"
    __table_args__ = (UniqueConstraint("mortgage_id", "effective_from"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    mortgage_id = Column(String(64), ForeignKey("mortgages.id"), index=True, nullable=False)
    effective_from = Column(String(7), nullable=False)
    annual_rate_pct = Column(Numeric(8, 4), nullable=False)
    fee = Column(Numeric(14, 2), nullable=False, default=0)
    day_basis = Column(Integer, nullable=False, default=365)
    payment_amount = Column(Numeric(14, 2), nullable=True)
    note = Column(String(200), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mortgage_id = Column(String(64), ForeignKey("mortgages.id"), index=True, nullable=False)
    kind = Column(String(5), nullable=False)
    period_key = Column(String(7), index=True, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    applied_date = Column(Date, nullable=False)
    note = Column(String(200), nullable=False, default="")


class MortgageStore:
    """Database-backed mortgage store."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def add_mortgage(self, mortgage: Mortgage) -> str:
        """Store a mortgage together with its terms and payments."""
        with self._session_factory() as session:
            if session.get(MortgageModel, mortgage.id) is not None:
                raise DuplicateMortgage(mortgage.id)
            session.add(
                MortgageModel(
                    id=mortgage.id,
                    title=mortgage.title,
                    holder=mortgage.holder,
                    kind=mortgage.kind,
                    principal=mortgage.principal,
                    origination_period=mortgage.origination_period,
                    term_months=mortgage.term_months,
                )
            )
            seen = set()
            for snap in mortgage.terms:
                if snap.effective_from in seen:
                    raise DuplicateTerms(mortgage.id, snap.effective_from)
                seen.add(snap.effective_from)
                session.add(self._terms_row(mortgage.id, snap))
            for payment in mortgage.payments:
                session.add(self._payment_row(mortgage.id, payment))
            session.commit()
        logger.info("Stored mortgage {} ({})", mortgage.id, mortgage.title)
        return mortgage.id

    def add_terms(self, mortgage_id: str, snapshot: TermsSnapshot) -> None:
        """Append a terms snapshot; an existing effective period is an error."""
        with self._session_factory() as session:
            self._require(session, mortgage_id)
            session.add(self._terms_row(mortgage_id, snapshot))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateTerms(mortgage_id, snapshot.effective_from) from exc

    def add_payment(self, mortgage_id: str, payment: Payment) -> None:
        with self._session_factory() as session:
            self._require(session, mortgage_id)
            session.add(self._payment_row(mortgage_id, payment))
            session.commit()

    def load(self, mortgage_id: str) -> Mortgage:
        """Read a mortgage and its whole history in a single transaction."""
        with self._session_factory() as session, session.begin():
            row = self._require(session, mortgage_id)
            terms = session.execute(
                select(TermsSnapshotModel)
                .where(TermsSnapshotModel.mortgage_id == mortgage_id)
                .order_by(TermsSnapshotModel.effective_from.asc(), TermsSnapshotModel.id.asc())
            ).scalars()
            payments = session.execute(
                select(PaymentModel)
                .where(PaymentModel.mortgage_id == mortgage_id)
                .order_by(PaymentModel.period_key.asc(), PaymentModel.applied_date.asc(), PaymentModel.id.asc())
            ).scalars()
            return Mortgage(
                id=row.id,
                title=row.title,
                principal=row.principal,
                origination_period=row.origination_period,
                term_months=row.term_months,
                terms=tuple(self._to_snapshot(t) for t in terms),
                payments=tuple(self._to_payment(p) for p in payments),
                holder=row.holder,
                kind=row.kind,
            )

    def list_mortgages(self) -> List[Dict[str, Any]]:
        with self._session_factory() as session:
            rows = session.execute(
                select(MortgageModel).order_by(MortgageModel.created_at.asc(), MortgageModel.id.asc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def purge(self, mortgage_id: str) -> None:
        """Delete a mortgage with its terms and payments atomically."""
        with self._session_factory() as session, session.begin():
            self._require(session, mortgage_id)
            session.execute(delete(PaymentModel).where(PaymentModel.mortgage_id == mortgage_id))
            session.execute(
                delete(TermsSnapshotModel).where(TermsSnapshotModel.mortgage_id == mortgage_id)
            )
            session.execute(delete(MortgageModel).where(MortgageModel.id == mortgage_id))
        logger.info("Purged mortgage {}", mortgage_id)

    def purge_all(self) -> int:
        with self._session_factory() as session, session.begin():
            count = session.execute(select(func.count()).select_from(MortgageModel)).scalar_one()
            session.execute(delete(PaymentModel))
            session.execute(delete(TermsSnapshotModel))
            session.execute(delete(MortgageModel))
        logger.info("Purged all {} mortgages", count)
        return count

    @staticmethod
    def _require(session: Session, mortgage_id: str) -> MortgageModel:
        row = session.get(MortgageModel, mortgage_id)
        if row is None:
            raise NotFound(mortgage_id)
        return row

    @staticmethod
    def _terms_row(mortgage_id: str, snap: TermsSnapshot) -> TermsSnapshotModel:
        return TermsSnapshotModel(
            mortgage_id=mortgage_id,
            effective_from=snap.effective_from,
            annual_rate_pct=snap.annual_rate_pct,
            fee=snap.fee,
            day_basis=snap.day_basis,
            payment_amount=snap.payment_amount,
            note=snap.note,
        )

    @staticmethod
    def _payment_row(mortgage_id: str, payment: Payment) -> PaymentModel:
        return PaymentModel(
            mortgage_id=mortgage_id,
            kind=payment.kind,
            period_key=payment.period_key,
            amount=payment.amount,
            applied_date=payment.applied_date,
            note=payment.note,
        )

    @staticmethod
    def _to_snapshot(row: TermsSnapshotModel) -> TermsSnapshot:
        return TermsSnapshot(
            effective_from=row.effective_from,
            annual_rate_pct=row.annual_rate_pct,
            fee=row.fee,
            day_basis=row.day_basis,
            payment_amount=row.payment_amount,
            note=row.note,
        )

    @staticmethod
    def _to_payment(row: PaymentModel) -> Payment:
        return Payment(
            kind=row.kind,
            period_key=row.period_key,
            amount=row.amount,
            applied_date=row.applied_date,
            note=row.note,
        )

    @staticmethod
    def _to_dict(row: MortgageModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "title": row.title,
            "holder": row.holder,
            "kind": row.kind,
            "principal": float(row.principal),
            "originationPeriod": row.origination_period,
            "termMonths": row.term_months,
            "createdAt": row.created_at.isoformat(),
        }


def create_store_from_env(url: str | None) -> MortgageStore:
    return MortgageStore(url or "sqlite:///mortgage_sim.sqlite3")
