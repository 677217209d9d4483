"""
Auth Blueprint - Admin authentication
Handles: Login, Logout, Password reset
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/admin')

from . import routes
