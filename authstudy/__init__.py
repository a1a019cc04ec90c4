"""Auth0 study API: bearer-token protected API with just-in-time user provisioning."""

__version__ = "1.0.0"
