from .firebase_identity_provider import FirebaseIdentityProvider

__all__ = [
    "FirebaseIdentityProvider",
]
