"""
Auth Routes - Admin login, logout and password reset
"""

from flask import render_template, redirect, url_for, request, flash
from utils.auth import get_auth, AuthError
from utils.decorators import anonymous_only
from utils.helpers import safe_next_url
from utils.validators import validate_login_form, validate_email, has_errors, LoginFormErrors
from . import auth_bp


@auth_bp.route('/login', methods=['GET', 'POST'])
@anonymous_only
def login():
    """Admin login"""
    form = {'email': '', 'password': ''}
    errors = LoginFormErrors()

    if request.method == 'POST':
        form = {
            'email': request.form.get('email', '').strip(),
            'password': request.form.get('password', ''),
        }
        errors = validate_login_form(form)
        if not has_errors(errors):
            try:
                get_auth().login(form['email'], form['password'])
            except AuthError as e:
                flash(e.message, 'error')
            else:
                flash('Login successful!', 'success')
                return redirect(safe_next_url(request.args.get('next'), url_for('dashboard.index')))

        form['password'] = ''
        return render_template('admin/login.html', form=form, errors=errors), 401

    return render_template('admin/login.html', form=form, errors=errors)


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """Logout current admin"""
    auth = get_auth()
    if not auth.is_authenticated:
        return redirect(url_for('auth.login'))

    try:
        auth.logout()
    except AuthError as e:
        flash(e.message, 'error')
        return redirect(url_for('dashboard.index'))

    flash('Logged out successfully', 'success')
    return redirect(url_for('auth.login'))


@auth_bp.route('/reset-password', methods=['GET', 'POST'])
def reset_password():
    """Send a password reset e-mail"""
    email = ''
    error = ''

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        error = validate_email(email)
        if not error:
            try:
                get_auth().reset_password(email)
            except AuthError as e:
                error = e.message
            else:
                flash('Password reset email sent. Check your inbox.', 'success')
                return redirect(url_for('auth.login'))

    return render_template('admin/reset_password.html', email=email, error=error)
