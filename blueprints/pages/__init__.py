"""
Pages Blueprint - Public portfolio pages
Handles: Home, About, Skills, Projects, Contact
"""

from flask import Blueprint

pages_bp = Blueprint('pages', __name__, url_prefix='')

from . import routes
