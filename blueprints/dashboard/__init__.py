"""
Dashboard Blueprint - Admin panel
Handles: Stats, Projects, Skills, Messages, Profile and Settings management
"""

from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/admin')

from . import routes
