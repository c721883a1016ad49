"""
Storage Utility
===============

Shared file upload with cloud (S3-compatible bucket) / local branching.
Used for client invoices and project screenshots.
"""

import os

from .config import get_config_value

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
    'pdf': 'application/pdf',
}


def is_cloud_storage():
    """Cloud storage is used whenever a bucket is configured."""
    return bool(get_config_value('S3_BUCKET'))


def upload_file(file_bytes, filename, subfolder):
    """Upload file to cloud storage or local filesystem.

    Args:
        file_bytes: Raw bytes of the file.
        filename: Target filename (e.g. "abc123.pdf").
        subfolder: Subfolder name (e.g. "invoices").

    Returns:
        Public URL (cloud) or a path served by this app like "/uploads/invoices/abc.pdf" (local).
    """
    if is_cloud_storage():
        return _upload_to_bucket(file_bytes, filename, subfolder)
    return _save_locally(file_bytes, filename, subfolder)


def _s3_client():
    import boto3
    return boto3.client(
        's3',
        region_name=get_config_value('S3_REGION'),
        endpoint_url=get_config_value('S3_ENDPOINT_URL'),
        aws_access_key_id=get_config_value('S3_ACCESS_KEY'),
        aws_secret_access_key=get_config_value('S3_SECRET_KEY'),
    )


def _upload_to_bucket(file_bytes, filename, subfolder):
    """Upload to an S3-compatible bucket via boto3."""
    bucket = get_config_value('S3_BUCKET')
    prefix = get_config_value('S3_FOLDER', 'uploads')
    object_key = f"{prefix}/{subfolder}/{filename}"

    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    content_type = CONTENT_TYPES.get(ext, 'application/octet-stream')

    client = _s3_client()
    client.put_object(
        Bucket=bucket,
        Key=object_key,
        Body=file_bytes,
        ACL='public-read',
        ContentType=content_type,
    )

    endpoint = get_config_value('S3_ENDPOINT_URL')
    if endpoint:
        return f"{endpoint.rstrip('/')}/{bucket}/{object_key}"
    region = get_config_value('S3_REGION')
    return f"https://{bucket}.s3.{region}.amazonaws.com/{object_key}"


def _save_locally(file_bytes, filename, subfolder):
    """Save to the local upload folder."""
    upload_root = get_config_value('UPLOAD_FOLDER')
    upload_dir = os.path.join(upload_root, subfolder)
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return f"/uploads/{subfolder}/{filename}"
