"""Profile schemas.

A profile is either an OAuth login (token pair + account metadata) or a
static API key. The ``type`` field is the discriminant; each variant only
carries its own fields, so a profile with both credentials and an API key
(or neither) fails validation.

On disk::

    {"type": "oauth", "credentials": {"accessToken": ...}, "account": {...}}
    {"type": "api_key", "api_key": "sk-ant-api03-...", "label": "ci"}
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from claude_switch.schemas.base import ClaudeCodeModel, StrictModel

__all__ = [
    'ApiKeyProfile',
    'OAuthAccount',
    'OAuthCredentials',
    'OAuthProfile',
    'Profile',
    'profile_adapter',
]


class OAuthCredentials(ClaudeCodeModel):
    """Claude Code's ``claudeAiOauth`` blob."""

    access_token: str
    refresh_token: str
    expires_at: int  # Milliseconds since epoch
    scopes: tuple[str, ...] = ()
    subscription_type: str | None = None
    rate_limit_tier: str | None = None


class OAuthAccount(ClaudeCodeModel):
    """Claude Code's ``oauthAccount`` blob from ~/.claude.json.

    Opaque pass-through data: only used for display.
    """

    account_uuid: str | None = None
    email_address: str | None = None
    organization_uuid: str | None = None
    organization_name: str | None = None
    display_name: str | None = None
    organization_role: str | None = None
    has_extra_usage_enabled: bool | None = None


class OAuthProfile(StrictModel):
    type: Literal['oauth'] = 'oauth'
    credentials: OAuthCredentials
    account: OAuthAccount = OAuthAccount()
    label: str | None = None

    @property
    def display_type(self) -> str:
        return self.type

    @property
    def display_email(self) -> str:
        return self.account.email_address or '(unknown)'

    @property
    def display_org(self) -> str:
        return self.account.organization_name or '-'

    @property
    def display_plan(self) -> str:
        return self.credentials.subscription_type or '-'

    @property
    def expires_at(self) -> datetime | None:
        return datetime.fromtimestamp(self.credentials.expires_at / 1000, UTC)


class ApiKeyProfile(StrictModel):
    type: Literal['api_key'] = 'api_key'
    api_key: str
    label: str | None = None

    @property
    def display_type(self) -> str:
        return self.type

    @property
    def display_email(self) -> str:
        return '-'

    @property
    def display_org(self) -> str:
        return '-'

    @property
    def display_plan(self) -> str:
        return '-'

    @property
    def expires_at(self) -> datetime | None:
        return None


# Discriminated union - type alias for annotations
type Profile = OAuthProfile | ApiKeyProfile

# TypeAdapter for deserializing with discriminator
profile_adapter: TypeAdapter[OAuthProfile | ApiKeyProfile] = TypeAdapter(
    Annotated[OAuthProfile | ApiKeyProfile, Field(discriminator='type')]
)
