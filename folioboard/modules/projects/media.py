"""
Pending Media
=============

Files the operator has picked in the editor but not saved yet, and the
preview handles used to show them before they are uploaded.

A preview holds the file bytes in memory until released. Every preview
must be released once its file is saved, replaced or discarded.
"""

import threading
import uuid

from ...gateway.models import GALLERY_LIMIT


class PreviewStore:
    """Server-side stand-in for browser object URLs"""

    def __init__(self):
        self._files = {}
        self._lock = threading.Lock()

    def create(self, file):
        """Hold file for previewing; returns its preview token"""
        token = uuid.uuid4().hex
        with self._lock:
            self._files[token] = file
        return token

    def get(self, token):
        with self._lock:
            return self._files.get(token)

    def release(self, token):
        with self._lock:
            self._files.pop(token, None)

    def release_all(self):
        with self._lock:
            self._files.clear()

    def __len__(self):
        return len(self._files)

    def __contains__(self, token):
        return token in self._files


class PendingUpload:
    """A gallery file queued for upload, paired with its preview"""

    def __init__(self, file, preview):
        self.file = file
        self.preview = preview


class PendingMedia:
    """Unsaved thumbnail, queued gallery uploads and gallery removals"""

    def __init__(self, previews, limit=GALLERY_LIMIT):
        self.previews = previews
        self.limit = limit
        self.thumbnail = None
        self.thumbnail_preview = None
        self.uploads = []
        self.removals = set()

    def set_thumbnail(self, file):
        """Replace the pending thumbnail; None clears it"""
        if self.thumbnail_preview:
            self.previews.release(self.thumbnail_preview)
        self.thumbnail = file
        self.thumbnail_preview = self.previews.create(file) if file is not None else None

    def remaining_slots(self, existing_count):
        """Gallery files that can still be queued"""
        kept = existing_count - len(self.removals)
        return max(0, self.limit - kept - len(self.uploads))

    def add_gallery_files(self, files, existing_count):
        """Queue files in order up to the remaining slots; the rest are dropped.

        Returns the accepted PendingUpload entries.
        """
        accepted = []
        for file in list(files)[:self.remaining_slots(existing_count)]:
            entry = PendingUpload(file, self.previews.create(file))
            self.uploads.append(entry)
            accepted.append(entry)
        return accepted

    def discard_upload(self, preview):
        """Drop a queued upload by its preview token and release the preview"""
        before = len(self.uploads)
        self.uploads = [entry for entry in self.uploads if entry.preview != preview]
        if len(self.uploads) != before:
            self.previews.release(preview)
            return True
        return False

    def mark_removed(self, path):
        """Mark a persisted gallery path for removal on save (set semantics)"""
        self.removals.add(path)

    def reset(self):
        """Release every preview and forget all pending changes"""
        for entry in self.uploads:
            self.previews.release(entry.preview)
        if self.thumbnail_preview:
            self.previews.release(self.thumbnail_preview)
        self.uploads = []
        self.removals.clear()
        self.thumbnail = None
        self.thumbnail_preview = None
