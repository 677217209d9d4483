"""
Data Management Module - Collection names, record shapes and form parsing
Documents keep the camelCase field names the hosted database already uses.
"""

from datetime import datetime, timezone
from flask import current_app

# Collection names
PROJECTS = 'projects'
SKILLS = 'skills'
MESSAGES = 'messages'
PROFILE = 'profile'

DEFAULT_PROFILE = {
    'name': 'Portfolio Owner',
    'title': 'Flutter Developer | Software Engineering Student',
    'bio': ('I am a passionate Flutter developer and software engineering student. '
            'I love building beautiful, modern and functional mobile applications, '
            'and I keep learning every day on the way to becoming a professional '
            'mobile app developer.'),
    'profileImage': '',
    'email': 'owner@example.com',
    'location': 'Earth',
    'university': 'University',
    'department': 'Software Engineering',
    'hometown': '',
    'resumeUrl': '',
    'socialLinks': {
        'github': 'https://github.com/',
        'linkedin': 'https://linkedin.com/',
        'email': 'mailto:owner@example.com'
    }
}


def get_document_store():
    """The document store configured for this app"""
    return current_app.extensions['document_store']


def utcnow():
    return datetime.now(timezone.utc)


def as_datetime(value):
    """Normalize a stored timestamp, defaulting to now when absent"""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return as_datetime(datetime.fromisoformat(value.replace('Z', '+00:00')))
        except ValueError:
            pass
    return utcnow()


def project_from_document(document):
    """Convert a project document into a record dict"""
    record = document.to_record()
    record['createdAt'] = as_datetime(record.get('createdAt'))
    record['updatedAt'] = as_datetime(record.get('updatedAt'))
    record['techStack'] = list(record.get('techStack') or [])
    record['featured'] = bool(record.get('featured', False))
    return record


def skill_from_document(document):
    record = document.to_record()
    record['featured'] = bool(record.get('featured', False))
    return record


def message_from_document(document):
    record = document.to_record()
    record['createdAt'] = as_datetime(record.get('createdAt'))
    record['read'] = bool(record.get('read', False))
    return record


def profile_from_document(document):
    record = document.to_record()
    social = {'github': '', 'linkedin': '', 'email': ''}
    social.update(record.get('socialLinks') or {})
    record['socialLinks'] = social
    record.setdefault('education', [])
    record.setdefault('goals', [])
    record.setdefault('experience', [])
    return record


def _field(form, key):
    return (form.get(key) or '').strip()


def _checkbox(form, key):
    return form.get(key) in ('on', 'true', '1', 'yes', True)


def _image_field(form, key):
    # A previously uploaded image travels back in a hidden "<key>_current" field
    return _field(form, key) or _field(form, f"{key}_current")


def _lines(value):
    return [line.strip() for line in (value or '').splitlines() if line.strip()]


def parse_tech_stack(form):
    """Tech stack from repeated fields or one comma separated field"""
    values = form.getlist('techStack') if hasattr(form, 'getlist') else form.get('techStack', [])
    if isinstance(values, str):
        values = [values]
    stack = []
    for value in values:
        for tech in value.split(','):
            tech = tech.strip()
            if tech and tech not in stack:
                stack.append(tech)
    return stack


def project_form_data(form, image_url=None):
    """Project form fields -> document payload"""
    return {
        'title': _field(form, 'title'),
        'description': _field(form, 'description'),
        'techStack': parse_tech_stack(form),
        'imageUrl': image_url if image_url is not None else _image_field(form, 'imageUrl'),
        'githubUrl': _field(form, 'githubUrl'),
        'demoUrl': _field(form, 'demoUrl'),
        'featured': _checkbox(form, 'featured'),
    }


def skill_form_data(form):
    proficiency = _field(form, 'proficiency')
    try:
        proficiency = int(proficiency)
    except ValueError:
        pass
    return {
        'name': _field(form, 'name'),
        'category': _field(form, 'category'),
        'icon': _field(form, 'icon'),
        'proficiency': proficiency,
        'featured': _checkbox(form, 'featured'),
    }


def contact_form_data(form):
    return {
        'name': _field(form, 'name'),
        'email': _field(form, 'email'),
        'message': _field(form, 'message'),
    }


def profile_form_data(form, image_url=None):
    return {
        'name': _field(form, 'name'),
        'title': _field(form, 'title'),
        'bio': _field(form, 'bio'),
        'profileImage': image_url if image_url is not None else _image_field(form, 'profileImage'),
        'email': _field(form, 'email'),
        'location': _field(form, 'location'),
        'university': _field(form, 'university'),
        'department': _field(form, 'department'),
        'hometown': _field(form, 'hometown'),
        'resumeUrl': _field(form, 'resumeUrl'),
        'socialLinks': {
            'github': _field(form, 'github'),
            'linkedin': _field(form, 'linkedin'),
            'email': _field(form, 'socialEmail'),
        },
        'goals': _lines(form.get('goals')),
        'experience': _lines(form.get('experience')),
    }
