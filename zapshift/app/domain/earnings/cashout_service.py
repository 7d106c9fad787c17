"""
Cashout Service (Domain Logic).

Validates and executes a rider's withdrawal of one parcel's earning.
Must be serialized per rider and transactional.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.exceptions import (
    AlreadyCashedOutError,
    ConflictError,
    InsufficientBalanceError,
    InsufficientPermissionsError,
    InvalidAmountError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from zapshift.app.domain.earnings.calculator import is_completed, parcel_earning, total_earning
from zapshift.app.models.enums import COMPLETED_STATUSES
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider import Rider, RiderCashout
from zapshift.app.services.cashout_lock import rider_cashout_lock

logger = logging.getLogger("zapshift.cashout")


@dataclass(frozen=True)
class CashoutPlan:
    """A validated cashout, bound to the rider ledger version it was checked against."""
    rider_id: int
    rider_email: str
    parcel_id: int
    amount: float
    rider_version: int
    pending_before: float


@dataclass(frozen=True)
class CashoutResult:
    parcel_id: int
    amount: float
    total_cashed_out: float
    pending_amount: float
    cashed_out_at: datetime


class CashoutService:

    @staticmethod
    async def completed_parcels(db: AsyncSession, rider_email: str) -> List[Parcel]:
        """Completed parcels assigned to a rider, latest delivery first."""
        result = await db.execute(
            select(Parcel)
            .where(
                Parcel.assigned_rider_email == rider_email,
                Parcel.delivery_status.in_(COMPLETED_STATUSES),
            )
            .order_by(Parcel.delivered_time.desc(), Parcel.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def prepare(db: AsyncSession, rider_email: str, amount: float, parcel_id: int) -> CashoutPlan:
        """
        Validate a cashout request without writing anything.

        Flow:
        1. Parcel exists
        2. Parcel not already cashed out
        3. Parcel is assigned to this rider and completed
        4. Requested amount equals the parcel's earning
        5. Rider's pending balance covers it

        Raises:
            ResourceNotFoundError, AlreadyCashedOutError, InsufficientPermissionsError,
            ValidationFailedError, InvalidAmountError, InsufficientBalanceError
        """
        parcel = await db.get(Parcel, parcel_id, populate_existing=True)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)

        if parcel.is_cashed_out:
            raise AlreadyCashedOutError(parcel_id)

        result = await db.execute(
            select(Rider)
            .where(Rider.email == rider_email)
            .execution_options(populate_existing=True)
        )
        rider = result.scalar_one_or_none()
        if rider is None:
            raise ResourceNotFoundError("Rider", rider_email)

        if parcel.assigned_rider_email != rider.email:
            raise InsufficientPermissionsError("Parcel is not assigned to this rider")

        if not is_completed(parcel):
            raise ValidationFailedError(
                "Parcel is not delivered yet",
                details={"delivery_status": parcel.delivery_status.value},
            )

        expected = parcel_earning(parcel)
        if amount != expected:
            raise InvalidAmountError(requested=amount, expected=expected)

        completed = await CashoutService.completed_parcels(db, rider.email)
        pending = total_earning(completed) - rider.total_cashed_out
        if pending < expected:
            raise InsufficientBalanceError(pending=pending, requested=expected)

        return CashoutPlan(
            rider_id=rider.id,
            rider_email=rider.email,
            parcel_id=parcel.id,
            amount=expected,
            rider_version=rider.version,
            pending_before=pending,
        )

    @staticmethod
    async def execute(db: AsyncSession, plan: CashoutPlan) -> CashoutResult:
        """
        Apply a validated cashout in one transaction.

        Both writes are conditional: the parcel flips only if it is still
        uncashed, the rider ledger moves only if its version is the one the
        plan was validated against. Any miss rolls back both.
        """
        now = datetime.now(timezone.utc)

        try:
            parcel_result = await db.execute(
                update(Parcel)
                .where(Parcel.id == plan.parcel_id, Parcel.is_cashed_out.is_(False))
                .values(is_cashed_out=True, cashed_out_at=now)
                .execution_options(synchronize_session=False)
            )
            if parcel_result.rowcount != 1:
                raise AlreadyCashedOutError(plan.parcel_id)

            rider_result = await db.execute(
                update(Rider)
                .where(Rider.id == plan.rider_id, Rider.version == plan.rider_version)
                .values(
                    total_cashed_out=Rider.total_cashed_out + plan.amount,
                    version=Rider.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if rider_result.rowcount != 1:
                raise ConflictError(
                    "Rider balance changed during cashout, please retry",
                    details={"rider_id": plan.rider_id},
                )

            db.add(RiderCashout(
                rider_id=plan.rider_id,
                parcel_id=plan.parcel_id,
                amount=plan.amount,
                created_at=now,
            ))
            await db.flush()
        except AlreadyCashedOutError:
            await db.rollback()
            if not await CashoutService._parcel_exists(db, plan.parcel_id):
                raise ResourceNotFoundError("Parcel", plan.parcel_id)
            raise
        except IntegrityError as e:
            await db.rollback()
            logger.warning(
                "Cashout write rejected: rider=%s parcel=%s error=%s",
                plan.rider_email, plan.parcel_id, e.orig,
            )
            if not await CashoutService._parcel_exists(db, plan.parcel_id):
                raise ResourceNotFoundError("Parcel", plan.parcel_id) from e
            if await CashoutService._has_cashout_record(db, plan.parcel_id):
                raise AlreadyCashedOutError(plan.parcel_id) from e
            raise
        except Exception:
            await db.rollback()
            raise

        await db.commit()

        total_result = await db.execute(
            select(Rider.total_cashed_out).where(Rider.id == plan.rider_id)
        )
        total_cashed_out = total_result.scalar_one()

        logger.info(
            "Cashout executed: rider=%s parcel=%s amount=%s total=%s",
            plan.rider_email, plan.parcel_id, plan.amount, total_cashed_out,
        )

        return CashoutResult(
            parcel_id=plan.parcel_id,
            amount=plan.amount,
            total_cashed_out=total_cashed_out,
            pending_amount=plan.pending_before - plan.amount,
            cashed_out_at=now,
        )

    @staticmethod
    async def _parcel_exists(db: AsyncSession, parcel_id: int) -> bool:
        result = await db.execute(select(Parcel.id).where(Parcel.id == parcel_id))
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def _has_cashout_record(db: AsyncSession, parcel_id: int) -> bool:
        result = await db.execute(
            select(func.count(RiderCashout.id)).where(RiderCashout.parcel_id == parcel_id)
        )
        return result.scalar_one() > 0

    @staticmethod
    async def request_cashout(
        db: AsyncSession,
        redis_client,
        rider_email: str,
        amount: float,
        parcel_id: int,
    ) -> CashoutResult:
        """
        Validate and execute a cashout while holding the rider's lock.

        Args:
            db: Database session
            redis_client: Redis client holding the per-rider lock
            rider_email: Rider requesting the cashout
            amount: Amount the rider claims for the parcel
            parcel_id: Completed parcel whose earning is withdrawn

        Returns:
            CashoutResult with the rider's new ledger totals
        """
        async with rider_cashout_lock(redis_client, rider_email):
            try:
                plan = await CashoutService.prepare(db, rider_email, amount, parcel_id)
            except (AlreadyCashedOutError, InvalidAmountError, InsufficientBalanceError) as e:
                logger.warning(
                    "Cashout rejected: rider=%s parcel=%s reason=%s",
                    rider_email, parcel_id, e.error_code,
                )
                raise
            return await CashoutService.execute(db, plan)

    @staticmethod
    async def history(db: AsyncSession, rider_email: str) -> List[RiderCashout]:
        """Cashout history of a rider, oldest first."""
        result = await db.execute(
            select(RiderCashout)
            .join(Rider, Rider.id == RiderCashout.rider_id)
            .where(Rider.email == rider_email)
            .order_by(RiderCashout.created_at, RiderCashout.id)
        )
        return list(result.scalars().all())
