"""
connectors — Slack app installation over OAuth2.

Provides:
  • signed, short-lived ``state`` tokens (CSRF protection, no server session)
  • the authorize redirect and the ``/authorize`` callback flow
  • code → access token exchange against ``oauth.access``
  • one stored (optionally Fernet-encrypted) token per workspace
"""
