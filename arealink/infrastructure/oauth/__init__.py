from arealink.infrastructure.oauth.di import OAuthInfraProvider

__all__ = ["OAuthInfraProvider"]
