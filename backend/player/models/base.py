"""Declarative base for the local item store."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
