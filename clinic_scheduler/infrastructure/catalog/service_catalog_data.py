from __future__ import annotations

from clinic_scheduler.domain.entities.service import Service

SERVICE_CATALOG: dict[str, Service] = {
    "dental-examination": Service(
        id="dental-examination",
        name="Dental Examination",
        duration_minutes=30,
        description="Routine check-up with a full oral examination.",
        price=60,
    ),
    "teeth-cleaning": Service(
        id="teeth-cleaning",
        name="Teeth Cleaning",
        duration_minutes=45,
        description="Scaling and polishing by the hygienist.",
        price=90,
    ),
    "tooth-filling": Service(
        id="tooth-filling",
        name="Tooth Filling",
        duration_minutes=60,
        description="Composite filling for a single tooth.",
        price=150,
    ),
    "teeth-whitening": Service(
        id="teeth-whitening",
        name="Teeth Whitening",
        duration_minutes=90,
        description="In-chair whitening session.",
        price=300,
    ),
    "root-canal": Service(
        id="root-canal",
        name="Root Canal Treatment",
        duration_minutes=120,
        is_active=False,
        description="Currently referred to a partner clinic.",
        price=800,
    ),
}
