"""Flush-only kernel services."""

from workshop_kernel.services.base import BaseService
from workshop_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = ["BaseService", "SequenceCounter", "SequenceService"]
