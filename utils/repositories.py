"""
Repositories Module - Per-entity data access with local state

Each repository instance owns the records of one collection for the view
that created it, plus a loading flag and an error string. Views create one
per request and call ``activate()``, which fetches on first use.

Writes go straight to the document store. After a successful write the
in-memory list is patched by document id and then re-read from the store in
``_resync()``, the single re-sync point. Concurrent writers are not
coordinated: the last re-sync to finish decides what the view shows.
"""

from flask import current_app

from backends import Document
from .data import (
    PROJECTS, SKILLS, MESSAGES, PROFILE, DEFAULT_PROFILE,
    get_document_store, utcnow,
    project_from_document, skill_from_document,
    message_from_document, profile_from_document,
)
from .validators import SKILL_CATEGORIES

IDLE = 'idle'
LOADING = 'loading'
LOADED = 'loaded'
FAILED = 'failed'


class CollectionRepository:
    collection = None
    order_by = None
    descending = True

    def __init__(self, store=None):
        self.store = store if store is not None else get_document_store()
        self.items = []
        self.loading = False
        self.error = None
        self._activated = False
        self._fetched = False

    @property
    def state(self):
        if self.loading:
            return LOADING
        if not self._fetched:
            return IDLE
        return FAILED if self.error else LOADED

    def activate(self):
        """Fetch once, the first time the repository is used"""
        if not self._activated:
            self._activated = True
            self.fetch()
        return self

    def _from_document(self, document):
        return document.to_record()

    def _prepare_new(self, data):
        return dict(data)

    def _prepare_patch(self, patch):
        return dict(patch)

    def _sort(self):
        if not self.order_by:
            return
        key = self.order_by
        present = [item for item in self.items if item.get(key) is not None]
        present.sort(key=lambda item: item[key], reverse=self.descending)
        self.items = present

    def fetch(self):
        """Read the whole collection. Failures are stored in ``error``."""
        self.loading = True
        try:
            documents = self.store.query_collection(self.collection, order_by=self.order_by,
                                                    descending=self.descending)
            self.items = [self._from_document(doc) for doc in documents]
            self.error = None
        except Exception as e:
            self.error = f"Failed to fetch {self.collection}"
            current_app.logger.error(f"Error fetching {self.collection}: {str(e)}")
        finally:
            self.loading = False
            self._fetched = True
        return self.items

    def _resync(self):
        self.fetch()

    def get(self, document_id):
        return next((item for item in self.items if item['id'] == document_id), None)

    def add(self, data, resync=True):
        """
        Store a new record and resync

        Args:
            data (dict): record fields
            resync (bool): re-read the collection afterwards; public
                submissions skip it since visitors cannot read the list

        Returns:
            str: id assigned by the document store
        """
        payload = self._prepare_new(data)
        try:
            document_id = self.store.add_document(self.collection, payload)
        except Exception as e:
            current_app.logger.error(f"Error adding to {self.collection}: {str(e)}")
            raise

        self.items.append(self._from_document(Document(id=document_id, data=payload)))
        self._sort()
        if resync:
            self._resync()
        return document_id

    def update(self, document_id, patch):
        """Apply a partial update and resync"""
        payload = self._prepare_patch(patch)
        try:
            self.store.update_document(self.collection, document_id, payload)
        except Exception as e:
            current_app.logger.error(f"Error updating {self.collection}/{document_id}: {str(e)}")
            raise

        for index, item in enumerate(self.items):
            if item['id'] == document_id:
                data = {k: v for k, v in item.items() if k != 'id'}
                data.update(payload)
                self.items[index] = self._from_document(Document(id=document_id, data=data))
        self._sort()
        self._resync()

    def delete(self, document_id):
        """Remove a record and resync"""
        try:
            self.store.delete_document(self.collection, document_id)
        except Exception as e:
            current_app.logger.error(f"Error deleting {self.collection}/{document_id}: {str(e)}")
            raise

        self.items = [item for item in self.items if item['id'] != document_id]
        self._resync()


class ProjectRepository(CollectionRepository):
    collection = PROJECTS
    order_by = 'createdAt'

    def _from_document(self, document):
        return project_from_document(document)

    def _prepare_new(self, data):
        now = utcnow()
        return {**data, 'createdAt': now, 'updatedAt': now}

    def _prepare_patch(self, patch):
        return {**patch, 'updatedAt': utcnow()}

    @property
    def projects(self):
        return self.items

    def featured(self):
        return [p for p in self.items if p.get('featured')]

    def technologies(self):
        """Unique technologies across all projects, in first-seen order"""
        seen = []
        for project in self.items:
            for tech in project.get('techStack', []):
                if tech not in seen:
                    seen.append(tech)
        return seen

    def filter_by_technology(self, tech):
        if not tech or tech == 'all':
            return list(self.items)
        needle = tech.lower()
        return [p for p in self.items
                if any(needle in t.lower() for t in p.get('techStack', []))]


class SkillRepository(CollectionRepository):
    collection = SKILLS
    order_by = 'proficiency'

    def _from_document(self, document):
        return skill_from_document(document)

    @property
    def skills(self):
        return self.items

    def by_category(self):
        """Skills grouped by category, categories in their fixed order"""
        grouped = {category: [] for category in SKILL_CATEGORIES}
        for skill in self.items:
            grouped.setdefault(skill.get('category'), []).append(skill)
        return grouped


class MessageRepository(CollectionRepository):
    collection = MESSAGES
    order_by = 'createdAt'

    def _from_document(self, document):
        return message_from_document(document)

    def _prepare_new(self, data):
        return {**data, 'read': False, 'createdAt': utcnow()}

    def _prepare_patch(self, patch):
        # Messages are never edited, only flagged as read
        if set(patch) - {'read'}:
            raise ValueError('Only the read flag of a message can be changed')
        return dict(patch)

    @property
    def messages(self):
        return self.items

    def unread(self):
        return [m for m in self.items if not m.get('read')]

    @property
    def unread_count(self):
        return len(self.unread())

    def mark_as_read(self, document_id):
        self.update(document_id, {'read': True})

    def mark_all_as_read(self):
        """Mark every unread message; failures are logged and skipped"""
        marked = 0
        for message in self.unread():
            try:
                self.mark_as_read(message['id'])
                marked += 1
            except Exception as e:
                current_app.logger.error(f"Error marking message {message['id']} as read: {str(e)}")
        return marked


class ProfileRepository(CollectionRepository):
    """The singleton profile record, created with defaults on first read"""
    collection = PROFILE

    def _from_document(self, document):
        return profile_from_document(document)

    @property
    def profile(self):
        return self.items[0] if self.items else None

    def fetch(self, create_missing=True):
        super().fetch()
        if create_missing and self.error is None and not self.items:
            current_app.logger.info('No profile found, creating the default profile')
            try:
                self.add(DEFAULT_PROFILE)
            except Exception:
                self.error = 'Failed to fetch profile'
        return self.items

    def _resync(self):
        self.fetch(create_missing=False)


__all__ = [
    'CollectionRepository',
    'ProjectRepository',
    'SkillRepository',
    'MessageRepository',
    'ProfileRepository',
]
