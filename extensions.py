"""
Extensions Module - Centralized initialization of Flask extensions
Keeps the SQLAlchemy handle out of app.py to avoid circular imports
between the app factory, models and the local document store.
"""

from flask_sqlalchemy import SQLAlchemy

# Initialize extensions without binding to app
db = SQLAlchemy()

__all__ = ['db']
