"""Business rules for catalog writes: id derivation, safe ids, image uploads."""
from __future__ import annotations
import os
import re

from ciit.core.config import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES
from ciit.domain.common.result import Result

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify_concept_id(name: str) -> str:
    """Derive a concept id from its display name: ``"Acme Fund!"`` -> ``"acme-fund"``."""
    return _NON_ALNUM.sub("-", (name or "").lower()).strip("-")


def validate_record_id(record_id: str, kind: str = "Record") -> Result[str]:
    """Ids double as file names, so they must stay inside their directory."""
    if not record_id or not record_id.strip():
        return Result.fail(f"{kind} id is required and cannot be empty.")
    if "/" in record_id or "\\" in record_id or record_id in (".", "..") or "\x00" in record_id:
        return Result.fail(f"{kind} id '{record_id}' is not a valid identifier.")
    return Result.ok(record_id)


def validate_concept_content(data: dict) -> Result[dict]:
    """Validates that a new concept has the minimum required fields."""
    name = (data.get("name") or "").strip()
    if not name:
        return Result.fail("Concept 'name' is required and cannot be empty.")
    return Result.ok(data)


def validate_image_upload(content_type: str, size: int) -> Result[str]:
    """
    Accepts JPEG, PNG, GIF and WebP up to MAX_IMAGE_BYTES.
    Returns Result.ok(content_type) or Result.fail(reason).
    """
    if content_type not in ALLOWED_IMAGE_TYPES:
        return Result.fail("Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed.")
    if size > MAX_IMAGE_BYTES:
        return Result.fail(f"Image is too large. Maximum size is {MAX_IMAGE_BYTES} bytes.")
    return Result.ok(content_type)


def image_filename(concept_id: str, original_filename: str, content_type: str) -> str:
    """``{conceptId}{ext}`` using the uploaded file's extension, else one implied by the MIME type."""
    ext = os.path.splitext(original_filename or "")[1].lower()
    if not ext:
        ext = ALLOWED_IMAGE_TYPES.get(content_type, "")
    return f"{concept_id}{ext}"
