"""
Admin UID Script
Creates the admin account (or signs in if it already exists) and prints its
UID, which goes into the database security rules as the only writer.

Usage:
    python scripts/get_admin_uid.py [email] [password]

Email and password default to ADMIN_EMAIL / ADMIN_PASSWORD.
"""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from backends import AuthProviderError, InMemoryPersistence, build_auth_provider
from backends.base import EMAIL_ALREADY_IN_USE


def get_admin_principal(provider, email, password):
    """Create the account when the provider supports it, else sign in"""
    if not hasattr(provider, 'sign_up'):
        return provider.sign_in(email, password), False

    try:
        return provider.sign_up(email, password), True
    except AuthProviderError as e:
        if e.code != EMAIL_ALREADY_IN_USE:
            raise
        print("Admin user already exists, trying to login...")
        return provider.sign_in(email, password), False


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    app = create_app()

    with app.app_context():
        email = argv[0] if len(argv) > 0 else app.config.get('ADMIN_EMAIL')
        password = argv[1] if len(argv) > 1 else app.config.get('ADMIN_PASSWORD')
        if not email or not password:
            print("Error: admin email and password are required (arguments or ADMIN_EMAIL/ADMIN_PASSWORD)")
            return 1

        provider = build_auth_provider(app.config, persistence=InMemoryPersistence())
        try:
            principal, created = get_admin_principal(provider, email, password)
        except AuthProviderError as e:
            print(f"Error: {e.code}")
            return 1

        print("Admin user created successfully!" if created else "Login successful!")
        print(f"Email: {principal.email}")
        print(f"UID: {principal.uid}")
        print("Copy this UID to your database security rules:")
        print(f'   "{principal.uid}"')

        # Sign out after getting UID
        provider.sign_out()
    return 0


if __name__ == '__main__':
    sys.exit(main())
