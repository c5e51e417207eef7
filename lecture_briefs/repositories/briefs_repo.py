"""Firestore accessors for the briefs collection."""

import time


BRIEFS_COLLECTION = 'briefs'


def sanitize_lecture_id(value):
    lecture_id = str(value or '').strip()
    if not lecture_id or len(lecture_id) > 160:
        return ''
    if '/' in lecture_id or lecture_id in {'.', '..'}:
        return ''
    return lecture_id


def brief_doc_ref(db, lecture_id):
    return db.collection(BRIEFS_COLLECTION).document(lecture_id)


def save_brief(db, lecture_id, payload, now=None):
    safe_id = sanitize_lecture_id(lecture_id)
    if not safe_id:
        raise ValueError('Invalid lecture id')
    timestamp = time.time() if now is None else now
    doc_ref = brief_doc_ref(db, safe_id)
    existing = doc_ref.get()
    record = dict(payload)
    record['lecture_id'] = safe_id
    record['updated_at'] = timestamp
    if not existing.exists:
        record['created_at'] = timestamp
    doc_ref.set(record, merge=True)
    return record


def get_brief(db, lecture_id):
    safe_id = sanitize_lecture_id(lecture_id)
    if not safe_id:
        return None
    doc = brief_doc_ref(db, safe_id).get()
    if not doc.exists:
        return None
    return doc.to_dict() or {}
