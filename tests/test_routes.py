import io
import time

from sqlalchemy import inspect

from extensions import db
from utils.data import DEFAULT_PROFILE
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD

CONTACT = {'name': 'Visitor', 'email': 'visitor@example.com', 'message': 'Hello, I like your work!'}

PROJECT = {
    'title': 'Weather App',
    'description': 'A Flutter app showing the local forecast.',
    'techStack': 'Flutter, Dart',
    'imageUrl': 'https://example.com/weather.png',
    'githubUrl': 'https://github.com/someone/weather',
    'demoUrl': '',
    'featured': 'on',
}


def _documents(app, collection):
    with app.app_context():
        return app.extensions['document_store'].query_collection(collection)


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'ok'


def test_home_creates_default_profile(app, client):
    response = client.get('/')

    assert response.status_code == 200
    assert DEFAULT_PROFILE['name'] in response.get_data(as_text=True)
    assert len(_documents(app, 'profile')) == 1


def test_public_pages_render(client):
    for path in ('/about', '/skills', '/projects', '/projects?tech=Flutter', '/contact'):
        assert client.get(path).status_code == 200, path


def test_unknown_page(client):
    assert client.get('/no-such-page').status_code == 404


def test_security_headers(client):
    response = client.get('/health')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'


def test_contact_submission_saved(app, client):
    response = client.post('/contact', data=CONTACT)

    assert response.status_code == 302
    messages = _documents(app, 'messages')
    assert len(messages) == 1
    assert messages[0].data['read'] is False
    assert messages[0].data['email'] == CONTACT['email']


def test_contact_validation_errors(app, client):
    response = client.post('/contact', data={'name': 'V', 'email': 'bad', 'message': 'hi'})

    assert response.status_code == 400
    page = response.get_data(as_text=True)
    assert 'Name must be at least 2 characters' in page
    assert 'Please enter a valid email address' in page
    assert _documents(app, 'messages') == []


def test_contact_overlong_message_rejected(app, client):
    response = client.post('/contact', data=dict(CONTACT, message='x' * 6000))

    assert response.status_code == 400
    assert 'Message must be at most 5000 characters' in response.get_data(as_text=True)
    assert _documents(app, 'messages') == []


def test_contact_honeypot(app, client):
    response = client.post('/contact', data=dict(CONTACT, website='http://spam.example.com'))

    assert response.status_code == 302
    assert _documents(app, 'messages') == []


def test_contact_rate_limited(app, client):
    app.extensions['rate_limits']['127.0.0.1'] = [(time.time(), 'contact')] * 10

    client.post('/contact', data=CONTACT)

    assert _documents(app, 'messages') == []


def test_dashboard_requires_login(client):
    response = client.get('/admin/')

    assert response.status_code == 302
    assert '/admin/login' in response.headers['Location']
    assert 'next=' in response.headers['Location']


def test_login_with_wrong_password(client):
    response = client.post('/admin/login', data={'email': ADMIN_EMAIL, 'password': 'wrong-pass'})

    assert response.status_code == 401
    assert 'Incorrect password.' in response.get_data(as_text=True)
    assert client.get('/admin/').status_code == 302


def test_login_form_validation(client):
    response = client.post('/admin/login', data={'email': '', 'password': ''})

    assert response.status_code == 401
    assert 'Email is required' in response.get_data(as_text=True)


def test_login_redirects_to_next(client):
    response = client.post('/admin/login?next=/admin/messages',
                           data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/admin/messages')


def test_login_ignores_external_next(client):
    response = client.post('/admin/login?next=https://evil.example.com/',
                           data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

    assert response.headers['Location'].endswith('/admin/')


def test_dashboard_after_login(admin_client):
    response = admin_client.get('/admin/')

    assert response.status_code == 200
    assert 'Recent Messages' in response.get_data(as_text=True)
    # Signed-in admins skip the login page
    assert admin_client.get('/admin/login').status_code == 302


def test_logout(admin_client):
    response = admin_client.post('/admin/logout')

    assert response.status_code == 302
    assert admin_client.get('/admin/').status_code == 302


def test_reset_password_page(client):
    response = client.post('/admin/reset-password', data={'email': 'nobody@example.com'})
    assert 'No account found with this email.' in response.get_data(as_text=True)

    response = client.post('/admin/reset-password', data={'email': ADMIN_EMAIL})
    assert response.status_code == 302


def test_add_project(app, admin_client):
    response = admin_client.post('/admin/projects/add', data=PROJECT)

    assert response.status_code == 302
    projects = _documents(app, 'projects')
    assert len(projects) == 1
    assert projects[0].data['techStack'] == ['Flutter', 'Dart']
    assert projects[0].data['featured'] is True

    page = admin_client.get('/projects').get_data(as_text=True)
    assert 'Weather App' in page


def test_add_project_with_upload(app, admin_client):
    data = dict(PROJECT, imageUrl='', image=(io.BytesIO(b'\x89PNG'), 'shot.png'))
    response = admin_client.post('/admin/projects/add', data=data,
                                 content_type='multipart/form-data')

    assert response.status_code == 302
    assert _documents(app, 'projects')[0].data['imageUrl'].startswith('data:image/png;base64,')


def test_add_project_invalid(app, admin_client):
    response = admin_client.post('/admin/projects/add', data=dict(PROJECT, githubUrl='github'))

    assert response.status_code == 400
    assert 'Please enter a valid URL for GitHub URL' in response.get_data(as_text=True)
    assert _documents(app, 'projects') == []


def test_edit_and_delete_project(app, admin_client):
    admin_client.post('/admin/projects/add', data=PROJECT)
    project_id = _documents(app, 'projects')[0].id

    assert admin_client.get(f'/admin/projects/edit/{project_id}').status_code == 200
    response = admin_client.post(f'/admin/projects/edit/{project_id}',
                                 data=dict(PROJECT, title='Forecast App'))
    assert response.status_code == 302
    assert _documents(app, 'projects')[0].data['title'] == 'Forecast App'

    admin_client.post(f'/admin/projects/delete/{project_id}')
    assert _documents(app, 'projects') == []


def test_edit_missing_project(admin_client):
    response = admin_client.get('/admin/projects/edit/missing')
    assert response.status_code == 302


def test_skills_crud(app, admin_client):
    skill = {'name': 'Dart', 'category': 'programming', 'icon': 'code', 'proficiency': '5'}
    assert admin_client.post('/admin/skills/add', data=skill).status_code == 302
    skill_id = _documents(app, 'skills')[0].id

    admin_client.post(f'/admin/skills/edit/{skill_id}', data=dict(skill, proficiency='4'))
    assert _documents(app, 'skills')[0].data['proficiency'] == 4

    response = admin_client.post('/admin/skills/add', data=dict(skill, category='cooking'))
    assert response.status_code == 400

    admin_client.post(f'/admin/skills/delete/{skill_id}')
    assert _documents(app, 'skills') == []


def test_messages_flow(app, admin_client):
    admin_client.post('/contact', data=CONTACT)
    admin_client.post('/contact', data=dict(CONTACT, name='Another'))
    first, second = _documents(app, 'messages')

    page = admin_client.get('/admin/messages?filter=unread').get_data(as_text=True)
    assert '2 unread of 2' in page

    admin_client.post(f'/admin/messages/{first.id}/read')
    assert [m.data['read'] for m in _documents(app, 'messages')] == [True, False]

    admin_client.post('/admin/messages/read-all')
    assert all(m.data['read'] for m in _documents(app, 'messages'))

    admin_client.post(f'/admin/messages/{second.id}/delete')
    assert [m.id for m in _documents(app, 'messages')] == [first.id]


def test_message_markup_stored_verbatim_and_escaped_on_display(app, admin_client):
    text = 'Tom & "Jerry" <b>say hi</b>'
    admin_client.post('/contact', data=dict(CONTACT, name='<i>Tom</i>', message=text))

    stored = _documents(app, 'messages')[0].data
    assert stored['message'] == text
    assert stored['name'] == '<i>Tom</i>'

    page = admin_client.get('/admin/messages').get_data(as_text=True)
    assert '&lt;b&gt;say hi&lt;/b&gt;' in page
    assert '&lt;i&gt;Tom&lt;/i&gt;' in page
    assert '<b>say hi' not in page


def test_edit_profile(app, admin_client):
    assert admin_client.get('/admin/profile').status_code == 200

    response = admin_client.post('/admin/profile', data={
        'name': 'Jane Doe',
        'title': 'Mobile Developer',
        'bio': 'I build mobile apps with Flutter and care about clean, tested code.',
        'email': 'jane@example.com',
        'location': 'Lisbon',
        'university': 'Tech University',
        'github': 'https://github.com/jane',
        'goals': 'Ship apps\nLearn Rust',
    })

    assert response.status_code == 302
    profile = _documents(app, 'profile')[0].data
    assert profile['name'] == 'Jane Doe'
    assert profile['goals'] == ['Ship apps', 'Learn Rust']
    assert 'Jane Doe' in admin_client.get('/about').get_data(as_text=True)


def test_edit_profile_invalid(admin_client):
    admin_client.get('/admin/profile')
    response = admin_client.post('/admin/profile', data={'name': 'J', 'bio': 'short'})

    assert response.status_code == 400
    assert 'Bio must be at least 50 characters' in response.get_data(as_text=True)


def test_settings(admin_client):
    page = admin_client.get('/admin/settings').get_data(as_text=True)
    assert ADMIN_EMAIL in page

    assert admin_client.post('/admin/settings').status_code == 302


def test_documents_table_created(app):
    with app.app_context():
        assert 'documents' in inspect(db.engine).get_table_names()
