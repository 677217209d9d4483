"""
Utils Package - Centralized utility modules initialization
"""

from .validators import (
    has_errors,
    validate_contact_form,
    validate_project_form,
    validate_skill_form,
    validate_profile_form,
    validate_login_form,
)
from .repositories import (
    ProjectRepository,
    SkillRepository,
    MessageRepository,
    ProfileRepository,
)
from .auth import AuthError, AuthService, get_auth, close_auth, current_id_token
from .decorators import login_required, anonymous_only
from .notifications import send_email, send_telegram_notification, notify_new_message
from .helpers import (
    ImageUploadError,
    allowed_file,
    image_to_data_url,
    safe_next_url,
    get_dashboard_stats,
    text_to_paragraphs,
)

__all__ = [
    # Validators
    'has_errors',
    'validate_contact_form',
    'validate_project_form',
    'validate_skill_form',
    'validate_profile_form',
    'validate_login_form',

    # Repositories
    'ProjectRepository',
    'SkillRepository',
    'MessageRepository',
    'ProfileRepository',

    # Auth
    'AuthError',
    'AuthService',
    'get_auth',
    'close_auth',
    'current_id_token',

    # Decorators
    'login_required',
    'anonymous_only',

    # Notifications
    'send_email',
    'send_telegram_notification',
    'notify_new_message',

    # Helpers
    'ImageUploadError',
    'allowed_file',
    'image_to_data_url',
    'safe_next_url',
    'get_dashboard_stats',
    'text_to_paragraphs',
]
