"""
api.responses
=============

Turn an :class:`~leasekeeper.models.OperationResult` into an HTTP reply.

Successful results return their ``data``.  Failures map by kind:

========== ======
not_found  404
validation 422
remote_io  503
partial    207 (body carries the primary record and the error)
========== ======
"""

from typing import Any

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from leasekeeper.models import FailureKind, OperationResult

STATUS_BY_KIND = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.VALIDATION: 422,
    FailureKind.REMOTE_IO: 503,
    FailureKind.PARTIAL: 207,
}


def unwrap(result: OperationResult) -> Any:
    if result.success:
        return result.data
    status = STATUS_BY_KIND.get(result.kind, 500)
    if result.kind is FailureKind.PARTIAL:
        return JSONResponse(
            status_code=status,
            content=jsonable_encoder({"error": result.error, "kind": result.kind, "data": result.data}),
        )
    raise HTTPException(status_code=status, detail=result.error)
