"""Affiliate attribution: who referred the current visitor.

An attribution is captured from the landing URL and stays valid for a
fixed 30-day window.  Expiry is evaluated lazily by whoever reads it;
nothing sweeps stale records in the background.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlsplit

ATTRIBUTION_WINDOW = timedelta(days=30)

# Query parameter aliases, highest priority first.
_ID_PARAMS = ("aff", "affiliate", "ref")
_CODE_PARAMS = ("aff_code", "affiliate_code")
_CAMPAIGN_PARAMS = ("campaign", "utm_campaign")
_SOURCE_PARAMS = ("source", "utm_source")
_MEDIUM_PARAMS = ("medium", "utm_medium")


@dataclass(frozen=True)
class AffiliateParams:
    id: str | None = None
    code: str | None = None
    campaign: str | None = None
    source: str | None = None
    medium: str | None = None

    @property
    def is_present(self) -> bool:
        """True when the URL actually identified an affiliate."""
        return bool(self.id or self.code)


@dataclass(frozen=True)
class AffiliateAttribution:
    """A stored attribution.

    Invariant: ``expires_at == captured_at + ATTRIBUTION_WINDOW``.
    """

    params: AffiliateParams
    captured_at: datetime
    expires_at: datetime

    @staticmethod
    def capture(params: AffiliateParams, now: datetime) -> AffiliateAttribution:
        return AffiliateAttribution(
            params=params,
            captured_at=now,
            expires_at=now + ATTRIBUTION_WINDOW,
        )

    @property
    def affiliate_id(self) -> str | None:
        return self.params.id

    @property
    def affiliate_code(self) -> str | None:
        return self.params.code

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class Affiliate:
    """An affiliate account as known to the billing system."""

    id: str
    name: str
    status: str
    email: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "Active"


def extract_params(url: str) -> AffiliateParams:
    """Pull affiliate tracking parameters out of a landing URL.

    For each field the first alias present wins, in declaration order
    (``aff`` beats ``affiliate`` beats ``ref``).  A URL without a query
    string yields all-None fields.
    """
    query = parse_qs(urlsplit(url or "").query, keep_blank_values=False)

    def first(names: tuple[str, ...]) -> str | None:
        for name in names:
            values = query.get(name)
            if values:
                return values[0]
        return None

    return AffiliateParams(
        id=first(_ID_PARAMS),
        code=first(_CODE_PARAMS),
        campaign=first(_CAMPAIGN_PARAMS),
        source=first(_SOURCE_PARAMS),
        medium=first(_MEDIUM_PARAMS),
    )
