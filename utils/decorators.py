"""
Decorators Module - Authentication decorators
"""

from functools import wraps
from flask import redirect, url_for, flash, request
from .auth import get_auth


def login_required(f):
    """Decorator to require a signed-in admin"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_auth().is_authenticated:
            flash('Please login to access this page.', 'error')
            return redirect(url_for('auth.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def anonymous_only(f):
    """Decorator that sends signed-in admins to the dashboard"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_auth().is_authenticated:
            return redirect(url_for('dashboard.index'))
        return f(*args, **kwargs)
    return decorated_function
