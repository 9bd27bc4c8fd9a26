from venue_auth.sdk.client import AuthClient, extract_bearer_token

__all__ = ["AuthClient", "extract_bearer_token"]
