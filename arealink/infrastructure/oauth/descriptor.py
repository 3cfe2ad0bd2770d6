"""Static descriptions of the OAuth providers arealink knows how to talk to."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from arealink.domain.identity.model.profile import Profile
from arealink.domain.shared.error import ExternalServiceError

ProfileExtractor = Callable[[Mapping[str, Any]], Profile]


@dataclass(frozen=True)
class ProviderDescriptor:
    """Endpoints and behaviour of an OAuth provider, as documented by the provider."""

    display_name: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    profile_extractor: ProfileExtractor
    default_scopes: tuple[str, ...] = ()
    default_prompt: str | None = None
    audience: str | None = None
    authorization_params: Mapping[str, str] = field(default_factory=dict)
    userinfo_headers: Mapping[str, str] = field(default_factory=dict)
    token_auth_method: Literal["post", "basic"] = "post"
    token_format: Literal["form", "json"] = "form"


def _text(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def google_profile(raw: Mapping[str, Any]) -> Profile:
    subject = _text(raw.get("sub"))
    if not subject:
        raise ExternalServiceError("google: sub missing from userinfo", code="oauth_profile_error")
    return Profile(
        provider="google",
        subject=subject,
        email=_text(raw.get("email")) or None,
        name=_text(raw.get("name")) or None,
        picture_url=_text(raw.get("picture")) or None,
        raw=dict(raw),
    )


def github_profile(raw: Mapping[str, Any]) -> Profile:
    subject = _text(raw.get("id"))
    if not subject:
        raise ExternalServiceError("github: id missing from userinfo", code="oauth_profile_error")
    return Profile(
        provider="github",
        subject=subject,
        email=_text(raw.get("email")) or None,
        name=_text(raw.get("name")) or _text(raw.get("login")) or None,
        picture_url=_text(raw.get("avatar_url")) or None,
        raw=dict(raw),
    )


def zoom_profile(raw: Mapping[str, Any]) -> Profile:
    subject = _text(raw.get("id"))
    if not subject:
        raise ExternalServiceError("zoom: id missing from user profile", code="oauth_profile_error")
    full_name = " ".join(p for p in (_text(raw.get("first_name")), _text(raw.get("last_name"))) if p)
    return Profile(
        provider="zoom",
        subject=subject,
        email=_text(raw.get("email")) or None,
        name=_text(raw.get("display_name")) or full_name or None,
        picture_url=_text(raw.get("pic_url")) or None,
        raw=dict(raw),
    )


BUILTIN_DESCRIPTORS: dict[str, ProviderDescriptor] = {
    "google": ProviderDescriptor(
        display_name="Google",
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        default_scopes=("openid", "email", "profile"),
        authorization_params={"access_type": "offline", "include_granted_scopes": "true"},
        profile_extractor=google_profile,
    ),
    "github": ProviderDescriptor(
        display_name="GitHub",
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        userinfo_url="https://api.github.com/user",
        default_scopes=("read:user", "user:email"),
        userinfo_headers={"Accept": "application/vnd.github+json"},
        profile_extractor=github_profile,
    ),
    "zoom": ProviderDescriptor(
        display_name="Zoom",
        authorize_url="https://zoom.us/oauth/authorize",
        token_url="https://zoom.us/oauth/token",
        userinfo_url="https://api.zoom.us/v2/users/me",
        token_auth_method="basic",
        profile_extractor=zoom_profile,
    ),
}
