"""katafree: multi-tenant task and webhook manager API."""

__version__ = "0.1.0"
