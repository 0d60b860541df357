"""Declarative base for the catalog store models"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
