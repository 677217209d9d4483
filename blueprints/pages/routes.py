"""
Pages Routes - Public portfolio pages
"""

from flask import render_template, redirect, url_for, request, flash, current_app
from utils.repositories import ProjectRepository, SkillRepository, MessageRepository, ProfileRepository
from utils.validators import validate_contact_form, has_errors, ContactFormErrors
from utils.data import contact_form_data
from utils.security import check_rate_limit
from utils.notifications import notify_new_message
from . import pages_bp


@pages_bp.route('/')
def index():
    """Home page - profile summary, featured projects and skills"""
    profile = ProfileRepository().activate()
    projects = ProjectRepository().activate()
    skills = SkillRepository().activate()

    return render_template('pages/home.html',
                           profile=profile.profile,
                           featured_projects=projects.featured()[:3],
                           featured_skills=[s for s in skills.skills if s.get('featured')][:6],
                           error=profile.error or projects.error or skills.error)


@pages_bp.route('/about')
def about():
    """About page - bio, education, goals and experience"""
    profile = ProfileRepository().activate()
    return render_template('pages/about.html', profile=profile.profile, error=profile.error)


@pages_bp.route('/skills')
def skills():
    """Skills grouped by category"""
    repo = SkillRepository().activate()
    return render_template('pages/skills.html',
                           skills_by_category=repo.by_category(),
                           error=repo.error)


@pages_bp.route('/projects')
def projects():
    """Projects list with technology filter"""
    repo = ProjectRepository().activate()
    selected = request.args.get('tech', 'all')
    return render_template('pages/projects.html',
                           projects=repo.filter_by_technology(selected),
                           technologies=repo.technologies(),
                           selected=selected,
                           error=repo.error)


@pages_bp.route('/contact', methods=['GET', 'POST'])
def contact():
    """Contact form - saves a message for the admin"""
    profile = ProfileRepository().activate().profile
    form = {}
    errors = ContactFormErrors()

    if request.method == 'POST':
        # Honeypot spam protection
        if request.form.get('website'):
            flash('Message sent successfully! I will get back to you soon.', 'success')
            return redirect(url_for('pages.contact'))

        if not check_rate_limit('contact'):
            flash('Too many requests. Please try again in a minute.', 'error')
            return redirect(url_for('pages.contact'))

        form = contact_form_data(request.form)
        errors = validate_contact_form(form)
        if not has_errors(errors):
            try:
                message_id = MessageRepository().add(form, resync=False)
            except Exception:
                flash('Failed to send message. Please try again.', 'error')
            else:
                current_app.logger.info(f"Contact message saved, message_id: {message_id}")
                notify_new_message(form)
                flash('Message sent successfully! I will get back to you soon.', 'success')
                return redirect(url_for('pages.contact'))

        return render_template('pages/contact.html', profile=profile,
                               form=form, errors=errors), 400

    return render_template('pages/contact.html', profile=profile, form=form, errors=errors)
