"""Unit tests for door registration and the serial counter"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from inspex.doors.serials import get_counter, update_serial_config
from inspex.doors.service import (
    create_door,
    delete_door,
    door_history,
    get_door,
    list_doors,
    list_pending_certification,
    list_pending_inspection,
    update_door,
)
from inspex.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from inspex.models import PurchaseOrder


pytestmark = pytest.mark.unit


class TestCreateDoor:
    """Test door registration"""

    def test_identifiers_and_initial_state(self, door):
        assert door.serial_number == "MF42-18-0006"
        assert door.drawing_number == "S201"
        assert door.door_type == "V1"
        assert door.description == "1.8 Meter 400 kPa Refuge Bay Door"
        assert door.po_number == "PO-1001"
        assert door.job_number == "J-77"
        assert door.inspection_status == "pending"
        assert door.certification_status == "pending"

    def test_drawing_numbers_increase(self, db_session, door, admin_user):
        second = create_door(db_session, "PO-1001", 7, "1.8", 400, actor_id=admin_user.id)
        third = create_door(db_session, "PO-2002", 1, "1.5", 140, actor_id=admin_user.id)
        db_session.commit()

        assert second.drawing_number == "S202"
        assert third.drawing_number == "S203"
        assert third.door_type == "V2"

    def test_purchase_order_reused(self, db_session, door, admin_user):
        create_door(db_session, "PO-1001", 7, "1.8", 400, actor_id=admin_user.id)
        db_session.commit()

        pos = db_session.execute(select(PurchaseOrder)).scalars().all()
        assert [po.po_number for po in pos] == ["PO-1001"]

    def test_duplicate_serial_conflicts_without_consuming_number(self, db_session, door, admin_user):
        with pytest.raises(ConflictError):
            create_door(db_session, "PO-9999", 6, "1.8", 400, actor_id=admin_user.id)

        nxt = create_door(db_session, "PO-1001", 8, "1.8", 400, actor_id=admin_user.id)
        db_session.commit()
        assert nxt.drawing_number == "S202"
        assert db_session.execute(
            select(PurchaseOrder).where(PurchaseOrder.po_number == "PO-9999")
        ).scalar_one_or_none() is None

    def test_same_number_different_size_is_distinct(self, db_session, door, admin_user):
        other = create_door(db_session, "PO-1001", 6, "2.0", 400, actor_id=admin_user.id)
        assert other.serial_number == "MF42-20-0006"

    @pytest.mark.parametrize("kwargs", [
        {"size": "2.4", "pressure": 400, "po_number": "PO-1"},
        {"size": "1.8", "pressure": 250, "po_number": "PO-1"},
        {"size": "1.8", "pressure": 400, "po_number": "   "},
    ])
    def test_invalid_input(self, db_session, inspection_points, admin_user, kwargs):
        with pytest.raises(ValidationError):
            create_door(db_session, door_number=1, actor_id=admin_user.id, **kwargs)

    def test_metre_and_millimetre_sizes(self, db_session, inspection_points, admin_user):
        door = create_door(db_session, "PO-1", 3, "1500", 140, actor_id=admin_user.id)
        assert door.serial_number == "MF42-15-0003"


class TestSerialCounter:
    """Test the counter behind drawing numbers"""

    def test_deleted_door_number_not_reused(self, db_session, door, admin_user):
        delete_door(db_session, door.id, actor_id=admin_user.id)
        db_session.commit()

        replacement = create_door(db_session, "PO-1001", 6, "1.8", 400, actor_id=admin_user.id)
        db_session.commit()
        assert replacement.drawing_number == "S202"

    def test_raise_starting_serial(self, db_session, door, admin_user):
        update_serial_config(db_session, actor_id=admin_user.id, starting_serial=300)
        db_session.commit()

        nxt = create_door(db_session, "PO-1001", 7, "1.8", 400, actor_id=admin_user.id)
        assert nxt.drawing_number == "S302"

    def test_lowering_starting_serial_after_issue_rejected(self, db_session, door, admin_user):
        with pytest.raises(ValidationError):
            update_serial_config(db_session, actor_id=admin_user.id, starting_serial=100)

    def test_change_prefix(self, db_session, door, admin_user):
        update_serial_config(db_session, actor_id=admin_user.id, serial_prefix="MF50")
        db_session.commit()

        nxt = create_door(db_session, "PO-1001", 7, "1.8", 400, actor_id=admin_user.id)
        assert nxt.serial_number == "MF50-18-0007"
        assert get_counter(db_session).serial_prefix == "MF50"

    def test_blank_prefix_rejected(self, db_session, admin_user):
        with pytest.raises(ValidationError):
            update_serial_config(db_session, actor_id=admin_user.id, serial_prefix="  ")


class TestQueries:
    """Test door lookups and queues"""

    def test_get_unknown_door(self, db_session):
        with pytest.raises(NotFoundError):
            get_door(db_session, uuid4())

    def test_list_filters(self, db_session, door, admin_user):
        create_door(db_session, "PO-2002", 1, "1.5", 140, actor_id=admin_user.id)
        db_session.commit()

        doors, total = list_doors(db_session)
        assert total == 2
        doors, total = list_doors(db_session, po_number="PO-2002")
        assert total == 1 and doors[0].serial_number == "MF42-15-0001"
        doors, total = list_doors(db_session, q="0006")
        assert [d.id for d in doors] == [door.id]

    def test_queues(self, db_session, inspected_door, admin_user):
        fresh = create_door(db_session, "PO-2002", 1, "1.5", 140, actor_id=admin_user.id)
        db_session.commit()

        assert [d.id for d in list_pending_inspection(db_session)] == [fresh.id]
        assert [d.id for d in list_pending_certification(db_session)] == [inspected_door.id]



class TestUpdateDoor:
    """Test editing the mutable door fields"""

    def test_edit_job_number_and_description(self, db_session, door, admin_user):
        update_door(
            db_session, door.id, actor_id=admin_user.id,
            updates={"job_number": " J-88 ", "description": "Refurbished door"},
        )
        db_session.commit()
        db_session.refresh(door)

        assert door.job_number == "J-88"
        assert door.description == "Refurbished door"
        assert door.serial_number == "MF42-18-0006"
        entry = door_history(db_session, door.id)[-1]
        assert entry.action == "DOOR_UPDATED"
        assert entry.metadata_json["job_number"] == {"old": "J-77", "new": "J-88"}

    def test_clear_job_number(self, db_session, door, admin_user):
        update_door(db_session, door.id, actor_id=admin_user.id, updates={"job_number": ""})
        assert door.job_number is None

    def test_unchanged_values_not_audited(self, db_session, door, admin_user):
        update_door(db_session, door.id, actor_id=admin_user.id, updates={"job_number": "J-77"})
        assert door_history(db_session, door.id)[-1].action == "DOOR_CREATED"

    @pytest.mark.parametrize("updates", [
        {"serial_number": "MF42-18-0099"},
        {"drawing_number": "S999"},
        {"po_number": "PO-9"},
        {"door_number": 9, "job_number": "J-1"},
        {"size": "2.0"},
        {"description": "   "},
    ])
    def test_fixed_fields_refused(self, db_session, door, admin_user, updates):
        with pytest.raises(ValidationError):
            update_door(db_session, door.id, actor_id=admin_user.id, updates=updates)
        db_session.refresh(door)
        assert door.job_number == "J-77"
        assert door.serial_number == "MF42-18-0006"

    def test_unknown_door(self, db_session, admin_user):
        with pytest.raises(NotFoundError):
            update_door(db_session, uuid4(), actor_id=admin_user.id, updates={"job_number": "J-1"})

class TestDeleteAndHistory:
    def test_delete_inspected_door_refused(self, db_session, inspected_door, admin_user):
        with pytest.raises(InvalidStateError):
            delete_door(db_session, inspected_door.id, actor_id=admin_user.id)

    def test_history_is_keyed_by_door(self, db_session, inspected_door):
        actions = [e.action for e in door_history(db_session, inspected_door.id)]
        assert actions == ["DOOR_CREATED", "INSPECTION_STARTED", "INSPECTION_COMPLETED"]
