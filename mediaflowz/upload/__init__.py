from mediaflowz.upload.base import BaseUploader
from mediaflowz.upload.batch import MediaUploadHandler, upload_batch
from mediaflowz.upload.factory import ProviderSelector, UploaderFactory
from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult

__all__ = [
    "BaseUploader",
    "MediaFile",
    "MediaUploadHandler",
    "ProviderSelector",
    "UploadOptions",
    "UploadResult",
    "UploaderFactory",
    "upload_batch",
]
