"""Remote delivery infrastructure"""

from .sink import RemoteSink

__all__ = ["RemoteSink"]
