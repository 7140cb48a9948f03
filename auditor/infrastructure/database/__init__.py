"""Database producers"""

from .hooks import SQLAlchemyEventProducer

__all__ = ["SQLAlchemyEventProducer"]
