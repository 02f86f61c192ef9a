"""HTTP surface of the workshop ledger."""

from workshop_api.app import create_app

__all__ = ["create_app"]
