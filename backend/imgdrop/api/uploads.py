"""
Upload endpoint for presigned URL generation.

Implements the direct-to-storage upload flow:
1. POST /get-upload-url - Get a presigned PUT URL and the eventual read URL
2. Client PUTs the file straight to the store

The backend never handles file bytes. Presigned URLs expire after
5 minutes (configurable) and only allow writing the one key they name.
"""
import logging
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from imgdrop.api.dependencies import get_issuer
from imgdrop.errors import CredentialIssuanceError
from imgdrop.schemas.upload import ErrorResponse, UploadUrlRequest, UploadUrlResponse
from imgdrop.storage.presign import CredentialIssuer
from imgdrop.utils.logging import log_credential_failed, log_credential_issued
from imgdrop.utils.metrics import (
    content_type_label,
    upload_credential_failures_total,
    upload_credentials_issued_total,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ISSUANCE_FAILED_MESSAGE = "Failed to generate upload URL"


@router.post(
    "/get-upload-url",
    response_model=UploadUrlResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def get_upload_url(
    request: UploadUrlRequest,
    issuer: CredentialIssuer = Depends(get_issuer)
):
    """
    Generate a presigned URL for direct file upload.

    Flow:
    1. Derive a unique object key from the file name
    2. Sign a PUT for that key and content type
    3. Return the signed URL and the object's read URL

    The client then PUTs the file to uploadUrl with the returned headers
    and shows fileUrl once the store answered 2xx.
    """
    start_time = time.time()

    try:
        credential = issuer.issue_upload_credential(request.file_name, request.file_type)
    except ValueError as e:
        upload_credential_failures_total.labels(reason="invalid_request").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=str(e)).model_dump()
        )
    except CredentialIssuanceError as e:
        upload_credential_failures_total.labels(reason="store").inc()
        log_credential_failed(logger, request.file_name, e.message, content_type=request.file_type)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=ISSUANCE_FAILED_MESSAGE).model_dump()
        )

    upload_credentials_issued_total.labels(content_type=content_type_label(request.file_type)).inc()
    log_credential_issued(
        logger,
        object_key=credential.object_key,
        content_type=request.file_type,
        duration_ms=(time.time() - start_time) * 1000
    )

    return UploadUrlResponse.from_credential(credential)
