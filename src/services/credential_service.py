"""Credential status evaluation against a reference instant."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from models.analytics import CredentialState, CredentialStatus, CredentialSummary
from models.records import CredentialRecord
from services.summary_service import days_between

EXPIRING_WINDOW_DAYS = 30


def classify_credential(
    credential: CredentialRecord, now: datetime
) -> Tuple[CredentialState, Optional[int]]:
    """Return the credential state and whole days until expiry (None if no expiry)."""
    if credential.expiry_date is None:
        return CredentialState.VALID, None

    days_until_expiry = days_between(now, credential.expiry_date)
    if days_until_expiry < 0:
        return CredentialState.EXPIRED, days_until_expiry
    if days_until_expiry <= EXPIRING_WINDOW_DAYS:
        return CredentialState.EXPIRING, days_until_expiry
    return CredentialState.VALID, days_until_expiry


def evaluate_credentials(
    credentials: Sequence[CredentialRecord], now: datetime
) -> CredentialStatus:
    """Classify every credential and tally the aggregate counts."""
    summaries = []
    counts = {state: 0 for state in CredentialState}
    next_expiry: Optional[datetime] = None

    for credential in credentials:
        state, days_until_expiry = classify_credential(credential, now)
        counts[state] += 1
        upcoming = credential.expiry_date is not None and credential.expiry_date >= now
        if state != CredentialState.EXPIRED and upcoming:
            if next_expiry is None or credential.expiry_date < next_expiry:
                next_expiry = credential.expiry_date
        summaries.append(
            CredentialSummary(
                id=credential.id,
                type=credential.type,
                number=credential.number,
                status=state,
                issued_date=credential.issued_date,
                expiry_date=credential.expiry_date,
                days_until_expiry=days_until_expiry,
            )
        )

    return CredentialStatus(
        total=len(summaries),
        valid=counts[CredentialState.VALID],
        expiring=counts[CredentialState.EXPIRING],
        expired=counts[CredentialState.EXPIRED],
        next_expiry_date=next_expiry,
        credentials=tuple(summaries),
    )
