"""
Dashboard Routes - Admin management of the portfolio content
Handles: projects, skills, contact messages, profile and account settings
"""

from flask import render_template, redirect, url_for, request, flash, current_app
from utils.auth import get_auth, AuthError
from utils.data import project_form_data, skill_form_data, profile_form_data
from utils.decorators import login_required
from utils.helpers import image_to_data_url, get_dashboard_stats, ImageUploadError
from utils.repositories import ProjectRepository, SkillRepository, MessageRepository, ProfileRepository
from utils.validators import (
    validate_project_form, validate_skill_form, validate_profile_form, has_errors,
    ProjectFormErrors, SkillFormErrors, ProfileFormErrors, SKILL_CATEGORIES,
)
from . import dashboard_bp


@dashboard_bp.route('/')
@login_required
def index():
    """Dashboard overview"""
    projects = ProjectRepository().activate()
    skills = SkillRepository().activate()
    messages = MessageRepository().activate()

    stats = get_dashboard_stats(projects, skills, messages)
    return render_template('admin/dashboard.html',
                           stats=stats,
                           recent_projects=projects.projects[:5],
                           recent_messages=messages.messages[:5],
                           error=projects.error or skills.error or messages.error)


# Projects Routes

@dashboard_bp.route('/projects')
@login_required
def projects():
    repo = ProjectRepository().activate()
    return render_template('admin/projects.html', projects=repo.projects, error=repo.error)


def _project_from_request():
    """Form data plus the uploaded image, if any. Upload problems land in errors."""
    upload_error = ''
    image_url = None
    try:
        image_url = image_to_data_url(request.files.get('image'))
    except ImageUploadError as e:
        upload_error = str(e)

    form = project_form_data(request.form, image_url=image_url)
    errors = validate_project_form(form)
    if upload_error:
        errors.imageUrl = upload_error
    return form, errors


@dashboard_bp.route('/projects/add', methods=['GET', 'POST'])
@login_required
def add_project():
    """Add new project"""
    if request.method == 'POST':
        form, errors = _project_from_request()
        if not has_errors(errors):
            try:
                ProjectRepository().add(form)
            except Exception:
                flash('Failed to save project. Please try again.', 'error')
            else:
                flash('Project added successfully!', 'success')
                return redirect(url_for('dashboard.projects'))

        return render_template('admin/project_form.html', form=form, errors=errors,
                               project_id=None), 400

    return render_template('admin/project_form.html', form={'techStack': []},
                           errors=ProjectFormErrors(), project_id=None)


@dashboard_bp.route('/projects/edit/<project_id>', methods=['GET', 'POST'])
@login_required
def edit_project(project_id):
    """Edit an existing project"""
    repo = ProjectRepository().activate()
    project = repo.get(project_id)
    if project is None:
        flash('Project not found', 'error')
        return redirect(url_for('dashboard.projects'))

    if request.method == 'POST':
        form, errors = _project_from_request()
        if not has_errors(errors):
            try:
                repo.update(project_id, form)
            except Exception:
                flash('Failed to update project. Please try again.', 'error')
            else:
                flash('Project updated successfully!', 'success')
                return redirect(url_for('dashboard.projects'))

        return render_template('admin/project_form.html', form=form, errors=errors,
                               project_id=project_id), 400

    return render_template('admin/project_form.html', form=project,
                           errors=ProjectFormErrors(), project_id=project_id)


@dashboard_bp.route('/projects/delete/<project_id>', methods=['POST'])
@login_required
def delete_project(project_id):
    try:
        ProjectRepository().delete(project_id)
        flash('Project deleted successfully!', 'success')
    except Exception:
        flash('Failed to delete project', 'error')
    return redirect(url_for('dashboard.projects'))


# Skills Routes

@dashboard_bp.route('/skills')
@login_required
def skills():
    repo = SkillRepository().activate()
    return render_template('admin/skills.html', skills=repo.skills,
                           skills_by_category=repo.by_category(), error=repo.error)


@dashboard_bp.route('/skills/add', methods=['GET', 'POST'])
@login_required
def add_skill():
    """Add new skill"""
    if request.method == 'POST':
        form = skill_form_data(request.form)
        errors = validate_skill_form(form)
        if not has_errors(errors):
            try:
                SkillRepository().add(form)
            except Exception:
                flash('Failed to save skill. Please try again.', 'error')
            else:
                flash('Skill added successfully!', 'success')
                return redirect(url_for('dashboard.skills'))

        return render_template('admin/skill_form.html', form=form, errors=errors,
                               categories=SKILL_CATEGORIES, skill_id=None), 400

    return render_template('admin/skill_form.html', form={'proficiency': 3},
                           errors=SkillFormErrors(), categories=SKILL_CATEGORIES, skill_id=None)


@dashboard_bp.route('/skills/edit/<skill_id>', methods=['GET', 'POST'])
@login_required
def edit_skill(skill_id):
    repo = SkillRepository().activate()
    skill = repo.get(skill_id)
    if skill is None:
        flash('Skill not found', 'error')
        return redirect(url_for('dashboard.skills'))

    if request.method == 'POST':
        form = skill_form_data(request.form)
        errors = validate_skill_form(form)
        if not has_errors(errors):
            try:
                repo.update(skill_id, form)
            except Exception:
                flash('Failed to update skill. Please try again.', 'error')
            else:
                flash('Skill updated successfully!', 'success')
                return redirect(url_for('dashboard.skills'))

        return render_template('admin/skill_form.html', form=form, errors=errors,
                               categories=SKILL_CATEGORIES, skill_id=skill_id), 400

    return render_template('admin/skill_form.html', form=skill, errors=SkillFormErrors(),
                           categories=SKILL_CATEGORIES, skill_id=skill_id)


@dashboard_bp.route('/skills/delete/<skill_id>', methods=['POST'])
@login_required
def delete_skill(skill_id):
    try:
        SkillRepository().delete(skill_id)
        flash('Skill deleted successfully!', 'success')
    except Exception:
        flash('Failed to delete skill', 'error')
    return redirect(url_for('dashboard.skills'))


# Messages Routes

@dashboard_bp.route('/messages')
@login_required
def messages():
    """Contact messages, optionally only the unread ones"""
    repo = MessageRepository().activate()
    current_filter = request.args.get('filter', 'all')
    items = repo.unread() if current_filter == 'unread' else repo.messages
    return render_template('admin/messages.html',
                           messages=items,
                           unread_count=repo.unread_count,
                           total_count=len(repo.messages),
                           current_filter=current_filter,
                           error=repo.error)


@dashboard_bp.route('/messages/<message_id>/read', methods=['POST'])
@login_required
def mark_message_read(message_id):
    try:
        MessageRepository().mark_as_read(message_id)
    except Exception:
        flash('Failed to update message', 'error')
    return redirect(url_for('dashboard.messages', filter=request.args.get('filter', 'all')))


@dashboard_bp.route('/messages/read-all', methods=['POST'])
@login_required
def mark_all_messages_read():
    marked = MessageRepository().activate().mark_all_as_read()
    flash(f"Marked {marked} message(s) as read", 'success')
    return redirect(url_for('dashboard.messages'))


@dashboard_bp.route('/messages/<message_id>/delete', methods=['POST'])
@login_required
def delete_message(message_id):
    try:
        MessageRepository().delete(message_id)
        flash('Message deleted successfully', 'success')
    except Exception:
        flash('Failed to delete message', 'error')
    return redirect(url_for('dashboard.messages'))


# Profile and Settings Routes

@dashboard_bp.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    """Edit the public profile"""
    repo = ProfileRepository().activate()
    current = repo.profile
    if current is None:
        flash(repo.error or 'Failed to fetch profile', 'error')
        return redirect(url_for('dashboard.index'))

    if request.method == 'POST':
        upload_error = ''
        image_url = None
        try:
            image_url = image_to_data_url(request.files.get('image'))
        except ImageUploadError as e:
            upload_error = str(e)

        form = profile_form_data(request.form, image_url=image_url)
        errors = validate_profile_form(form)
        if not has_errors(errors) and not upload_error:
            try:
                repo.update(current['id'], form)
            except Exception:
                flash('Failed to update profile. Please try again.', 'error')
            else:
                flash('Profile updated successfully!', 'success')
                return redirect(url_for('dashboard.profile'))

        if upload_error:
            flash(upload_error, 'error')
        return render_template('admin/profile.html', form=form, errors=errors), 400

    return render_template('admin/profile.html', form=current, errors=ProfileFormErrors())


@dashboard_bp.route('/settings', methods=['GET', 'POST'])
@login_required
def settings():
    """Account settings - send a password reset link to the signed-in admin"""
    auth = get_auth()
    if request.method == 'POST':
        try:
            auth.reset_password(auth.user.email)
        except AuthError as e:
            flash(e.message, 'error')
        else:
            current_app.logger.info(f"Password reset requested from settings by {auth.user.email}")
            flash('Password reset email sent. Check your inbox.', 'success')
        return redirect(url_for('dashboard.settings'))

    return render_template('admin/settings.html', user=auth.user)
