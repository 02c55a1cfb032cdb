"""
Auth package for DataBot.

Service account token exchange and caching.
"""

from databot.auth.credentials import Credential, CredentialCache, ServiceAccount

__all__ = ["Credential", "CredentialCache", "ServiceAccount"]
