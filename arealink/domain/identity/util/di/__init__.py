from arealink.domain.identity.util.di.provider import IdentityProvider

__all__ = ["IdentityProvider"]
