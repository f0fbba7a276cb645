"""
Provider schemas.

Dependencies: pydantic
System role: Image provider API contracts
"""

from typing import Any

from pydantic import BaseModel


class ProviderInfoResponse(BaseModel):
    """Status of one image provider."""

    name: str
    available: bool
    description: str


class ProvidersResponse(BaseModel):
    """All providers keyed by provider name, plus the usable subset."""

    providers: dict[str, ProviderInfoResponse]
    available: list[str]


class ProviderAccountResponse(BaseModel):
    """Account details reported by a provider."""

    provider: str
    account: dict[str, Any]
