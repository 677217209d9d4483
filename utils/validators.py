"""
Validators Module - Field-level validation for every site form

Each ``validate_*_form`` takes a mapping of field values (a dict or the
request form) and returns an error record with one string per validated
field. An empty string means the field is valid. Validators never raise.
"""

import re
from dataclasses import dataclass, fields
from urllib.parse import urlsplit

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
# Schemes a stored link may use; http(s) also need a host
LINK_SCHEMES = {'http', 'https', 'mailto'}
IMAGE_SCHEMES = {'http', 'https', 'data'}
HOST_SCHEMES = {'http', 'https'}

SKILL_CATEGORIES = ('flutter', 'programming', 'tools', 'soft')
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5
MAX_MESSAGE_LENGTH = 5000


def _text(value):
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def validate_required(value, field_name):
    if not _text(value).strip():
        return f"{field_name} is required"
    return ''


def validate_min_length(value, min_length, field_name):
    if len(_text(value)) < min_length:
        return f"{field_name} must be at least {min_length} characters"
    return ''


def validate_email(email):
    email = _text(email)
    if not email:
        return 'Email is required'
    if not EMAIL_PATTERN.match(email):
        return 'Please enter a valid email address'
    return ''


def validate_max_length(value, max_length, field_name):
    if len(_text(value)) > max_length:
        return f"{field_name} must be at most {max_length} characters"
    return ''


def is_absolute_url(value, schemes=LINK_SCHEMES):
    value = _text(value).strip()
    if not value or re.search(r'\s', value):
        return False
    try:
        parts = urlsplit(value)
        host = parts.hostname
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if scheme not in schemes:
        return False
    if scheme in HOST_SCHEMES:
        return bool(host)
    return bool(parts.path)


def validate_url(url, field_name, schemes=LINK_SCHEMES):
    if not _text(url):
        return f"{field_name} is required"
    if not is_absolute_url(url, schemes):
        return f"Please enter a valid URL for {field_name}"
    return ''


def _as_proficiency(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(_text(value).strip())
    except ValueError:
        return None


def is_valid_proficiency(value):
    level = _as_proficiency(value)
    return level is not None and MIN_PROFICIENCY <= level <= MAX_PROFICIENCY


def is_valid_category(category):
    return _text(category) in SKILL_CATEGORIES


def _first_error(*checks):
    """Run checks in order and return the first failure"""
    for check in checks:
        error = check()
        if error:
            return error
    return ''


def _required_min(form, key, label, min_length):
    value = form.get(key)
    return _first_error(
        lambda: validate_required(value, label),
        lambda: validate_min_length(value, min_length, label),
    )


def _required_email(form, key='email'):
    value = form.get(key)
    return _first_error(
        lambda: validate_required(value, 'Email'),
        lambda: validate_email(value),
    )


@dataclass
class ContactFormErrors:
    name: str = ''
    email: str = ''
    message: str = ''


@dataclass
class ProjectFormErrors:
    title: str = ''
    description: str = ''
    imageUrl: str = ''
    githubUrl: str = ''
    demoUrl: str = ''
    techStack: str = ''


@dataclass
class SkillFormErrors:
    name: str = ''
    category: str = ''
    icon: str = ''
    proficiency: str = ''


@dataclass
class ProfileFormErrors:
    name: str = ''
    title: str = ''
    bio: str = ''
    email: str = ''
    location: str = ''
    university: str = ''


@dataclass
class LoginFormErrors:
    email: str = ''
    password: str = ''


def validate_contact_form(form):
    return ContactFormErrors(
        name=_required_min(form, 'name', 'Name', 2),
        email=_required_email(form),
        message=_first_error(
            lambda: _required_min(form, 'message', 'Message', 10),
            lambda: validate_max_length(form.get('message'), MAX_MESSAGE_LENGTH, 'Message'),
        ),
    )


def validate_project_form(form):
    tech_stack = form.get('techStack') or []
    if isinstance(tech_stack, str):
        tech_stack = [t for t in tech_stack.split(',') if t.strip()]

    demo_url = form.get('demoUrl')
    return ProjectFormErrors(
        title=_required_min(form, 'title', 'Title', 3),
        description=_required_min(form, 'description', 'Description', 10),
        imageUrl=validate_url(form.get('imageUrl'), 'Image URL', IMAGE_SCHEMES),
        githubUrl=validate_url(form.get('githubUrl'), 'GitHub URL'),
        # Demo link is optional
        demoUrl=validate_url(demo_url, 'Demo URL') if _text(demo_url) else '',
        techStack='' if tech_stack else 'At least one technology is required',
    )


def validate_skill_form(form):
    category = form.get('category')
    return SkillFormErrors(
        name=_required_min(form, 'name', 'Skill name', 2),
        category=_first_error(
            lambda: validate_required(category, 'Category'),
            lambda: '' if is_valid_category(category) else 'Please select a valid category',
        ),
        icon=validate_required(form.get('icon'), 'Icon'),
        proficiency='' if is_valid_proficiency(form.get('proficiency'))
        else f"Proficiency must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}",
    )


def validate_profile_form(form):
    return ProfileFormErrors(
        name=_required_min(form, 'name', 'Name', 2),
        title=_required_min(form, 'title', 'Title', 5),
        bio=_required_min(form, 'bio', 'Bio', 50),
        email=_required_email(form),
        location=validate_required(form.get('location'), 'Location'),
        university=validate_required(form.get('university'), 'University'),
    )


def validate_login_form(form):
    return LoginFormErrors(
        email=_required_email(form),
        password=_required_min(form, 'password', 'Password', 6),
    )


def has_errors(errors):
    """True if any field of an error record (or error dict) is non-empty"""
    if isinstance(errors, dict):
        values = errors.values()
    else:
        values = (getattr(errors, f.name) for f in fields(errors))
    return any(value != '' for value in values)


__all__ = [
    'SKILL_CATEGORIES',
    'ContactFormErrors',
    'ProjectFormErrors',
    'SkillFormErrors',
    'ProfileFormErrors',
    'LoginFormErrors',
    'validate_required',
    'validate_min_length',
    'validate_max_length',
    'validate_email',
    'validate_url',
    'is_absolute_url',
    'is_valid_proficiency',
    'is_valid_category',
    'validate_contact_form',
    'validate_project_form',
    'validate_skill_form',
    'validate_profile_form',
    'validate_login_form',
    'has_errors',
]
