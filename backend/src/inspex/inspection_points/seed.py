"""Default refuge bay door checklist."""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.inspection import InspectionPoint

logger = logging.getLogger(__name__)

DEFAULT_INSPECTION_POINTS = [
    ("Drawing Number Confirmation", "Confirm Drawing Number used by Fabricator"),
    ("Overall Dimensions", "Confirm Over-All Dimensions"),
    ("Member Sizes", "Confirm Member Sizes as per Drawing (As Per Drawing)"),
    ("Plate Thickness", "Confirm Plate Thickness (HP=6mm / LP=3mm) (140 kPa - HP & LP=3mm)"),
    (
        "Structural Welding",
        "Confirm Welding on Structural Members. Size and Quality (6mm) (100 x 200 space Weld)",
    ),
    ("Hinge Welding", "Confirm Welding on Hinges. Size and Quality (8mm)"),
    ("Hinge Plate Thickness", "Confirm Hinge Plate Thickness (8mm)"),
    ("Hinge Pin Dimension", "Confirm Hinge Pin Dimension (M24 x 200) (M20 for 140 kPa Door)"),
    ("General Fit Check", "Check for General fit, excessive Gaps between frame and door"),
    ("Door Cleaning", "Door cleaned of all spatter and welding defects"),
    ("Grease Nipples", "Grease nipples fitted to all hinges"),
    ("Door Functionality", "Door Functionality & Smooth operation"),
    ("Silicone Seal", "Silicone added to the inside joints to insure a water/ airtight seal"),
]


def seed_inspection_points(db: Session) -> int:
    """Insert the default checklist if no points exist. Returns rows added."""
    existing = db.execute(select(func.count(InspectionPoint.id))).scalar()
    if existing:
        logger.info(f"Inspection points already present ({existing}), skipping seed")
        return 0

    for index, (name, description) in enumerate(DEFAULT_INSPECTION_POINTS, start=1):
        db.add(InspectionPoint(name=name, description=description, order_index=index, is_active=True))
    db.flush()
    logger.info(f"Seeded {len(DEFAULT_INSPECTION_POINTS)} inspection points")
    return len(DEFAULT_INSPECTION_POINTS)
