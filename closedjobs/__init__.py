"""Closed-jobs tracker: CRUD over a remote table of closed job records."""

__version__ = "0.5.0"
