from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Mapping, Union

from lounge.errors import PersistenceError, ValidationError
from lounge.models import Booking, BookingKind, model_for, validate_booking

logger = logging.getLogger(__name__)


# --- BOOKING SUBMISSION ------------------------------------------------------

class BookingSubmissionService:
    """Validates a booking and writes it with a single insert.

    Nothing is retried: a failed submission is resubmitted by the user.
    """

    def __init__(self, repository, today: Callable[[], date] = date.today):
        self.repository = repository
        self.today = today

    def submit(self, kind: Union[BookingKind, str], record: Mapping[str, Any]) -> Booking:
        kind = BookingKind.parse(kind)

        try:
            booking = validate_booking(kind, record, self.today())
        except ValidationError as e:
            logger.info("Rejected %s submission: %s (%s)", kind.value, e.message, e.field)
            raise

        try:
            row = self.repository.insert(kind, booking.to_insert_payload())
        except PersistenceError as e:
            logger.warning("%s submission failed: %s", kind.label, e.message)
            raise

        persisted = model_for(kind).from_row(row)
        logger.info(
            "%s %s created for %s (%s guests)",
            kind.label, persisted.id, persisted.sort_date.isoformat(), persisted.guest_count,
        )
        return persisted
