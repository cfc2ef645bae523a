"""
File Upload Utility - validate, store and read uploaded files.

Resumes:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Word 97 (.doc), stored as-is (no text extraction)
Max file size: 5MB

Logos: PNG or JPEG, max 800KB.

Stored files live under settings.upload_dir and are served at /uploads.
"""

import io
import logging
import uuid
import zipfile
from pathlib import Path
from typing import Optional, Tuple

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from fastapi import HTTPException, UploadFile
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from hunter.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

MAX_RESUME_SIZE_MB = 5
MAX_RESUME_SIZE_BYTES = MAX_RESUME_SIZE_MB * 1024 * 1024
RESUME_EXTENSIONS = {'.pdf', '.doc', '.docx'}

MAX_LOGO_SIZE_KB = 800
MAX_LOGO_SIZE_BYTES = MAX_LOGO_SIZE_KB * 1024
LOGO_CONTENT_TYPES = {'image/png': '.png', 'image/jpeg': '.jpg'}

UPLOAD_URL_PREFIX = "/uploads"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def upload_root() -> Path:
    root = Path(settings.upload_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


def save_bytes(content: bytes, subdir: str, ext: str) -> str:
    """Write a file under upload_dir/subdir and return its public path."""
    folder = upload_root() / subdir
    folder.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{ext}"
    (folder / name).write_bytes(content)
    return f"{UPLOAD_URL_PREFIX}/{subdir}/{name}"


def resolve_public_path(public_path: str, subdir: str = "") -> Optional[Path]:
    """
    Map a /uploads/... path back to the file on disk, if it exists.

    The file must sit inside upload_dir (or upload_dir/subdir); paths that
    climb out with '..' or symlinks resolve to None.
    """
    if not public_path or not public_path.startswith(UPLOAD_URL_PREFIX + "/"):
        return None
    base = (upload_root() / subdir).resolve()
    path = (upload_root() / public_path[len(UPLOAD_URL_PREFIX) + 1:]).resolve()
    if not path.is_relative_to(base) or not path.is_file():
        return None
    return path


def read_stored_resume(public_path: str) -> Tuple[bytes, str]:
    """
    Read a resume previously stored by /upload, with the same type and size
    rules as a direct upload.

    Raises:
        HTTPException on validation errors
    """
    path = resolve_public_path(public_path, "resumes")
    if path is None:
        raise HTTPException(status_code=400, detail="Resume not found")

    ext = get_file_extension(path.name)
    if ext not in RESUME_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload a PDF, DOC, or DOCX file"
        )
    if path.stat().st_size > MAX_RESUME_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_RESUME_SIZE_MB}MB"
        )
    return path.read_bytes(), ext


def delete_public_path(public_path: str) -> None:
    path = resolve_public_path(public_path)
    if path:
        path.unlink()


async def read_resume(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded resume.

    Returns:
        Tuple of (content, extension)

    Raises:
        HTTPException on validation errors
    """
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="Resume is required")

    ext = get_file_extension(file.filename)
    if ext not in RESUME_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload a PDF, DOC, or DOCX file"
        )

    content = await file.read()

    if len(content) > MAX_RESUME_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_RESUME_SIZE_MB}MB"
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return content, ext


async def store_resume(file: UploadFile) -> Tuple[str, str]:
    """Validate and store a resume. Returns (public path, extracted text)."""
    content, ext = await read_resume(file)
    path = save_bytes(content, "resumes", ext)
    return path, extract_resume_text(content, ext)


def extract_resume_text(content: bytes, ext: str) -> str:
    """Best-effort text for search and AI prompts; empty when unreadable."""
    if ext == '.pdf':
        return extract_from_pdf(content)
    if ext == '.docx':
        return extract_from_docx(content)
    return ""


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return '\n'.join(text_parts)
    except (PdfReadError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Could not read PDF resume: {e}")
        return ""


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    try:
        doc = Document(io.BytesIO(content))
    except (zipfile.BadZipFile, PackageNotFoundError, ValueError, KeyError) as e:
        logger.warning(f"Could not read DOCX resume: {e}")
        return ""

    text_parts = []

    # Extract paragraphs
    for para in doc.paragraphs:
        if para.text.strip():
            text_parts.append(para.text)

    # Extract tables
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts)


async def store_logo(file: UploadFile) -> str:
    """Validate and store a company logo. Returns its public path."""
    ext = LOGO_CONTENT_TYPES.get(file.content_type or "")
    if ext is None:
        raise HTTPException(status_code=400, detail="Logo must be a PNG or JPEG image")

    content = await file.read()
    if len(content) > MAX_LOGO_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Logo too large. Maximum size: {MAX_LOGO_SIZE_KB}KB"
        )
    return save_bytes(content, "logos", ext)


async def read_audio(file: Optional[UploadFile]) -> Tuple[bytes, str]:
    """Recorded answer bytes and a filename the transcription API accepts."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No audio file provided")
    return content, file.filename
