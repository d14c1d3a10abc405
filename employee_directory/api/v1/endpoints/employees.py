from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from employee_directory.core.dependencies import get_store
from employee_directory.core.errors import EmployeeNotFoundError, EmployeeStoreUnavailableError
from employee_directory.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from employee_directory.services.employee_store import EmployeeStoreClient
from employee_directory.services.profile_picture import ProfilePictureError, profile_picture_encoder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _unavailable(err: EmployeeStoreUnavailableError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Employee API unavailable ({err.operation})",
    )


def _not_found(employee_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Employee with id {employee_id} not found",
    )


@router.get("", response_model=list[Employee])
async def list_employees(store: EmployeeStoreClient = Depends(get_store)):  # noqa: B008
    try:
        return await store.get_employees()
    except EmployeeStoreUnavailableError as err:
        raise _unavailable(err) from err


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    record: EmployeeCreate,
    store: EmployeeStoreClient = Depends(get_store),  # noqa: B008
):
    try:
        return await store.add_employee(record)
    except EmployeeStoreUnavailableError as err:
        raise _unavailable(err) from err


@router.post("/profile-picture")
async def upload_profile_picture(file: UploadFile):
    file_bytes = await file.read()

    try:
        data_uri = profile_picture_encoder.to_data_uri(file_bytes, file.content_type)
    except ProfilePictureError as e:
        logger.error("Profile picture rejected for file=%s: %s", file.filename, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return {"profilePicture": data_uri}


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: int,
    store: EmployeeStoreClient = Depends(get_store),  # noqa: B008
):
    try:
        return await store.get_employee(employee_id)
    except EmployeeNotFoundError as err:
        raise _not_found(employee_id) from err
    except EmployeeStoreUnavailableError as err:
        raise _unavailable(err) from err


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: int,
    changes: EmployeeUpdate,
    store: EmployeeStoreClient = Depends(get_store),  # noqa: B008
):
    try:
        return await store.update_employee(employee_id, changes)
    except EmployeeNotFoundError as err:
        raise _not_found(employee_id) from err
    except EmployeeStoreUnavailableError as err:
        raise _unavailable(err) from err


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: int,
    store: EmployeeStoreClient = Depends(get_store),  # noqa: B008
):
    try:
        deleted = await store.delete_employee(employee_id)
    except EmployeeStoreUnavailableError as err:
        raise _unavailable(err) from err
    return {"deleted": deleted}
