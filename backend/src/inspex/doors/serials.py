"""Serial counter allocation and configuration.

The counter row is advanced with a single ``UPDATE ... RETURNING`` so two
concurrent door creations can never observe the same value.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..config import get_settings
from ..domain.numbering import next_serial
from ..errors import ValidationError
from ..models.serial_counter import SerialCounter

logger = logging.getLogger(__name__)

COUNTER_ID = 1


@dataclass
class SerialAllocation:
    prefix: str
    number: int  # starting_serial + sequence


def get_counter(db: Session) -> SerialCounter:
    """Load the counter row, creating it from settings on first use."""
    counter = db.get(SerialCounter, COUNTER_ID)
    if counter is not None:
        return counter

    settings = get_settings()
    try:
        with db.begin_nested():
            counter = SerialCounter(
                id=COUNTER_ID,
                serial_prefix=settings.SERIAL_PREFIX,
                starting_serial=settings.STARTING_SERIAL,
                issued_count=0,
            )
            db.add(counter)
    except IntegrityError:
        # Another transaction created it first
        counter = db.get(SerialCounter, COUNTER_ID)
    return counter


def allocate_serial(db: Session) -> SerialAllocation:
    """Atomically advance the counter and return the number for a new door."""
    get_counter(db)
    stmt = (
        update(SerialCounter)
        .where(SerialCounter.id == COUNTER_ID)
        .values(issued_count=SerialCounter.issued_count + 1)
        .returning(
            SerialCounter.issued_count,
            SerialCounter.starting_serial,
            SerialCounter.serial_prefix,
        )
        .execution_options(synchronize_session=False)
    )
    issued_count, starting_serial, prefix = db.execute(stmt).one()
    number = next_serial(starting_serial, issued_count)
    logger.debug(f"Allocated serial number {number} (sequence {issued_count})")
    return SerialAllocation(prefix=prefix, number=number)


def update_serial_config(
    db: Session,
    actor_id: UUID,
    starting_serial: Optional[int] = None,
    serial_prefix: Optional[str] = None,
) -> SerialCounter:
    """Change the numbering base or prefix.

    Raises:
        ValidationError: If the new values are malformed, or lowering the
            starting serial would hand out drawing numbers already issued
    """
    counter = get_counter(db)
    db.refresh(counter)
    before = {"starting_serial": counter.starting_serial, "serial_prefix": counter.serial_prefix}

    if starting_serial is not None:
        if starting_serial < 0:
            raise ValidationError("Starting serial must not be negative")
        if starting_serial < counter.starting_serial and counter.issued_count > 0:
            raise ValidationError(
                "Starting serial cannot be lowered after doors have been issued "
                f"(current {counter.starting_serial}, issued {counter.issued_count})"
            )
    if serial_prefix is not None:
        serial_prefix = serial_prefix.strip()
        if not serial_prefix:
            raise ValidationError("Serial prefix must not be empty")

    if starting_serial is not None:
        counter.starting_serial = starting_serial
    if serial_prefix is not None:
        counter.serial_prefix = serial_prefix

    log_audit_event(
        db=db,
        action="SERIAL_CONFIG_UPDATED",
        actor_id=actor_id,
        entity_type="serial_counter",
        metadata={
            "before": before,
            "after": {
                "starting_serial": counter.starting_serial,
                "serial_prefix": counter.serial_prefix,
            },
        },
    )
    db.flush()
    logger.info(
        f"Serial config updated: prefix={counter.serial_prefix}, "
        f"starting_serial={counter.starting_serial}"
    )
    return counter
