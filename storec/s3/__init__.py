from .client import S3Client
from .sign import SignatureV2Auth
from .upload import StreamingUploader

__all__ = ["S3Client", "SignatureV2Auth", "StreamingUploader"]
