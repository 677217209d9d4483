"""
Helpers Module - Utility functions for common operations
"""

import base64
import re
from urllib.parse import urlsplit
from flask import current_app
from markupsafe import Markup, escape


class ImageUploadError(ValueError):
    """Uploaded image rejected; the message is shown to the admin"""


def allowed_file(filename):
    """Check if file extension is allowed"""
    allowed_extensions = current_app.config.get('ALLOWED_EXTENSIONS', {'png', 'jpg', 'jpeg', 'gif', 'webp'})
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


def image_to_data_url(file_storage):
    """
    Encode an uploaded image as a data: URL so it can be stored in the
    record's image field like any other URL.

    Returns:
        str or None: data URL, or None when no file was uploaded
    """
    if file_storage is None or not file_storage.filename:
        return None

    mimetype = file_storage.mimetype or ''
    if not mimetype.startswith('image/') or not allowed_file(file_storage.filename):
        raise ImageUploadError('Please upload an image file')

    content = file_storage.read()
    max_size = current_app.config.get('MAX_IMAGE_SIZE', 2 * 1024 * 1024)
    if len(content) > max_size:
        raise ImageUploadError(f"Image size should be less than {max_size // (1024 * 1024)}MB")

    encoded = base64.b64encode(content).decode('ascii')
    return f"data:{mimetype};base64,{encoded}"


def safe_next_url(target, default):
    """Only allow same-site relative redirects"""
    if not target:
        return default
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or not target.startswith('/') or target.startswith('//'):
        return default
    return target


def get_dashboard_stats(projects, skills, messages):
    """Counters shown on the admin dashboard"""
    return {
        'total_projects': len(projects.items),
        'total_skills': len(skills.items),
        'total_messages': len(messages.items),
        'unread_messages': messages.unread_count,
        'featured_projects': len(projects.featured()),
    }


def text_to_paragraphs(text):
    """Render plain text as escaped <p> paragraphs with <br> line breaks"""
    if not text:
        return Markup('')
    txt = text.replace('\r\n', '\n').replace('\r', '\n').strip()
    paragraphs = [p.strip() for p in re.split(r'\n\s*\n', txt) if p.strip()]
    html = []
    for paragraph in paragraphs:
        lines = [str(escape(line)) for line in paragraph.split('\n')]
        html.append('<p>' + '<br>\n'.join(lines) + '</p>')
    return Markup(''.join(html))
