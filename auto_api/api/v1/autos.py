import logging
from fastapi import APIRouter, BackgroundTasks, Depends, File, Header, Query, Request, Response, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional

from auto_api.database import get_db
from auto_api.dependencies import CurrentUser, get_admin_user, get_admin_or_user
from auto_api.schemas.auto import AutoCreateRequest, AutoUpdateRequest, CreatePayload
from auto_api.schemas.common import ErrorResponse, success_response, page_response
from auto_api.services.auto_read_service import auto_read_service, serialize_auto
from auto_api.services.auto_write_service import auto_write_service
from auto_api.services.pageable import create_pageable
from auto_api.utils.exceptions import NotFoundException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/autos")

PAGING_PARAMS = ("page", "size")
NOT_FOUND = {404: {"model": ErrorResponse}}
FORBIDDEN = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get("", summary="Search autos (paginated)", responses=NOT_FOUND)
def find_autos(
    request: Request,
    page: Optional[str] = Query(None, description="Page number, starting at 0"),
    size: Optional[str] = Query(None, description="Page size, 0 = no paging"),
    db:   Session       = Depends(get_db),
):
    # every other query parameter is a search criterion, e.g. ?modell=a&sport=true
    suchkriterien = {
        key: value for key, value in request.query_params.items()
        if key not in PAGING_PARAMS and value != ""
    }
    pageable = create_pageable(page, size)
    logger.debug(f"find_autos: suchkriterien={suchkriterien}, pageable={pageable}")

    result = auto_read_service.find(db, suchkriterien, pageable)
    data = [serialize_auto(a) for a in result.content]
    return page_response(f"{len(data)} autos found", data, result, pageable)


@router.get("/file/{auto_id}", summary="Download the file of an auto", responses=NOT_FOUND)
def get_file(auto_id: int, db: Session = Depends(get_db)):
    auto_file = auto_read_service.find_file_by_auto_id(db, auto_id)
    if auto_file is None:
        raise NotFoundException("No file found")
    return Response(
        content=auto_file.data,
        media_type=auto_file.mimetype or "image/png",
        headers={"Content-Disposition": f'inline; filename="{auto_file.filename}"'},
    )


@router.get("/{auto_id}", summary="Find auto by ID", responses=NOT_FOUND)
def get_auto(
    auto_id:       int,
    response:      Response,
    bilder:        bool          = Query(False, description="Include Bilder"),
    if_none_match: Optional[str] = Header(None, description='Conditional GET, e.g. "0"'),
    db:            Session       = Depends(get_db),
):
    auto = auto_read_service.find_by_id(db, auto_id, mit_bilder=bilder)

    etag = f'"{auto.version}"'
    if if_none_match == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    response.headers["ETag"] = etag
    return success_response("Auto retrieved", serialize_auto(auto, mit_bilder=bilder))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create auto (admin, user)",
             responses=FORBIDDEN)
def create_auto(
    body:             AutoCreateRequest,
    request:          Request,
    response:         Response,
    background_tasks: BackgroundTasks,
    db:               Session     = Depends(get_db),
    _:                CurrentUser = Depends(get_admin_or_user),
):
    auto_id = auto_write_service.create(db, body, background_tasks)
    response.headers["Location"] = str(request.url_for("get_auto", auto_id=auto_id))
    return success_response("Auto created successfully", CreatePayload(id=auto_id).model_dump())


@router.post("/{auto_id}/file", status_code=status.HTTP_201_CREATED,
             summary="Upload a file for an auto (admin, user)", responses={**NOT_FOUND, **FORBIDDEN})
def upload_file(
    auto_id:  int,
    request:  Request,
    response: Response,
    file:     UploadFile  = File(...),
    db:       Session     = Depends(get_db),
    _:        CurrentUser = Depends(get_admin_or_user),
):
    content = file.file.read()
    auto_file = auto_write_service.add_file(
        db, auto_id, content, file.filename or "file", file.content_type or "application/octet-stream",
    )
    response.headers["Location"] = str(request.url_for("get_file", auto_id=auto_id))
    return success_response("File uploaded successfully", {
        "id":       auto_file.id,
        "filename": auto_file.filename,
        "mimetype": auto_file.mimetype,
        "size":     len(content),
    })


@router.put("/{auto_id}", status_code=status.HTTP_204_NO_CONTENT,
            summary="Update auto (admin, user)",
            responses={**NOT_FOUND, **FORBIDDEN, 412: {"model": ErrorResponse}, 428: {"model": ErrorResponse}})
def update_auto(
    auto_id:  int,
    body:     AutoUpdateRequest,
    if_match: Optional[str] = Header(None, description='Optimistic locking, e.g. "0"'),
    db:       Session       = Depends(get_db),
    _:        CurrentUser   = Depends(get_admin_or_user),
):
    new_version = auto_write_service.update(db, auto_id, body, if_match)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"ETag": f'"{new_version}"'})


@router.delete("/{auto_id}", status_code=status.HTTP_204_NO_CONTENT,
               summary="Delete auto (admin)", responses={**NOT_FOUND, **FORBIDDEN})
def delete_auto(
    auto_id: int,
    db:      Session     = Depends(get_db),
    _:       CurrentUser = Depends(get_admin_user),
):
    deleted = auto_write_service.delete(db, auto_id)
    logger.debug(f"delete_auto: id={auto_id}, deleted={deleted}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
