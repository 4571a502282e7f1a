import os
import uuid
from datetime import datetime, timezone

import bleach
from flask import current_app
from werkzeug.utils import secure_filename


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_datetime(datetime_obj):
    """Format datetime to an ISO string."""
    if not datetime_obj:
        return None
    return datetime_obj.isoformat()


def clean_text(value):
    """Strip markup from author-supplied free text."""
    if value is None:
        return None
    return bleach.clean(str(value), tags=[], strip=True).strip()


def allowed_file(filename):
    return "." in filename and \
        filename.rsplit(".", 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def save_upload(file, folder="assignments"):
    """Store an uploaded file under UPLOAD_FOLDER and return its public path."""
    safe_name = secure_filename(file.filename)
    extension = os.path.splitext(safe_name)[1].lower()
    filename = f"{folder.rstrip('s')}-{uuid.uuid4().hex}{extension}"

    target_dir = os.path.join(current_app.config["UPLOAD_FOLDER"], folder)
    os.makedirs(target_dir, exist_ok=True)
    file.save(os.path.join(target_dir, filename))

    return f"/uploads/{folder}/{filename}"
