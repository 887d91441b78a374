"""
Guardian Registry - trusted contacts persisted in a JSON store.

Guardians are only ever appended or removed, never edited in place. The id is
the only uniqueness constraint; the same phone or email may be registered on
several guardians.
"""

import logging
import re
import secrets
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from common.storage import JsonFileStore
from services.safecircle.errors import GuardianValidationError
from services.safecircle.models import Guardian
from services.safecircle.types import ContactMethod

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9\s\-()]{6,}$")
DEFAULT_RELATIONSHIP = "friend"


def make_guardian_id() -> str:
    """``g_<epoch ms>_<6 hex>``; the random suffix separates same-millisecond adds."""
    return f"g_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def validate_guardian_input(name: str, method: str, value: str) -> List[str]:
    """
    Check normalized guardian fields.

    Every rule is evaluated so the caller can report all problems at once.

    Returns:
        List of violated rule codes, empty when the input is valid
    """
    errors = []
    if not name:
        errors.append("name_required")
    if method not in {m.value for m in ContactMethod}:
        errors.append("method_must_be_sms_or_email")
    if not value:
        errors.append("value_required")
    if method == ContactMethod.EMAIL.value and value and "@" not in value:
        errors.append("email_invalid")
    if method == ContactMethod.SMS.value and value and not PHONE_PATTERN.match(value):
        errors.append("phone_invalid")
    return errors


class GuardianRegistry:
    """CRUD over the guardian collection."""

    def __init__(self, store: JsonFileStore):
        self._store = store

    def _parse(self, records: list) -> List[Guardian]:
        guardians = []
        for record in records:
            try:
                guardians.append(Guardian.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed guardian record %r: %s", record, e)
        return guardians

    def list(self) -> List[Guardian]:
        """All guardians in insertion order."""
        return self._parse(self._store.load())

    def add(
        self,
        name: Optional[str],
        method: Optional[str],
        value: Optional[str],
        relationship: Optional[str] = None,
    ) -> Guardian:
        """
        Validate and append a guardian.

        Raises:
            GuardianValidationError: listing every violated rule
        """
        name = (name or "").strip()
        method = (method or "").strip().lower()
        value = (value or "").strip()
        relationship = (relationship or "").strip() or DEFAULT_RELATIONSHIP

        errors = validate_guardian_input(name, method, value)
        if errors:
            raise GuardianValidationError(errors)

        guardian = Guardian(
            id=make_guardian_id(),
            name=name,
            method=ContactMethod(method),
            value=value,
            relationship=relationship,
            created_at=datetime.now(timezone.utc),
        )
        record = guardian.model_dump(mode="json")
        self._store.update(lambda records: records + [record])
        logger.info("Added guardian %s (%s)", guardian.id, guardian.method.value)
        return guardian

    def remove(self, guardian_id: str) -> int:
        """
        Remove the guardian with this exact id.

        Returns:
            Number of guardians removed (0 or 1)
        """
        removed = 0

        def _drop(records: list) -> list:
            nonlocal removed
            kept = [r for r in records if not (isinstance(r, dict) and r.get("id") == guardian_id)]
            removed = len(records) - len(kept)
            return kept

        self._store.update(_drop)
        if removed:
            logger.info("Removed guardian %s", guardian_id)
        return removed
