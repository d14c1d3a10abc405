from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from employee_directory.core.dependencies import get_controller
from employee_directory.core.errors import InvalidTransitionError
from employee_directory.models.directory import DirectoryView, FormFieldUpdate
from employee_directory.services.profile_picture import ProfilePictureError
from employee_directory.services.view_controller import DirectoryController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/directory", tags=["directory"])


def _conflict(err: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))


@router.get("", response_model=DirectoryView)
async def render_directory(controller: DirectoryController = Depends(get_controller)):  # noqa: B008
    return controller.render()


@router.post("/load", response_model=DirectoryView)
async def load_directory(controller: DirectoryController = Depends(get_controller)):  # noqa: B008
    await controller.load()
    return controller.render()


@router.post("/add", response_model=DirectoryView)
async def open_add_form(controller: DirectoryController = Depends(get_controller)):  # noqa: B008
    try:
        controller.show_add_form()
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()


@router.post("/view/{employee_id}", response_model=DirectoryView)
async def open_employee(
    employee_id: int,
    controller: DirectoryController = Depends(get_controller),  # noqa: B008
):
    try:
        await controller.show_employee(employee_id)
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()


@router.post("/edit/{employee_id}", response_model=DirectoryView)
async def open_edit_form(
    employee_id: int,
    controller: DirectoryController = Depends(get_controller),  # noqa: B008
):
    employee = controller.current_employee
    if employee is None or employee.id != employee_id:
        employee = controller.find_employee(employee_id)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with id {employee_id} is not in the directory",
        )

    try:
        controller.show_edit_form(employee)
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()


@router.post("/back", response_model=DirectoryView)
async def back_to_list(controller: DirectoryController = Depends(get_controller)):  # noqa: B008
    try:
        controller.return_to_list()
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()


@router.patch("/form", response_model=DirectoryView)
async def update_form_field(
    update: FormFieldUpdate,
    controller: DirectoryController = Depends(get_controller),  # noqa: B008
):
    try:
        controller.update_field(update.name, update.value)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err
    return controller.render()


@router.post("/form/profile-picture", response_model=DirectoryView)
async def upload_form_picture(
    file: UploadFile,
    controller: DirectoryController = Depends(get_controller),  # noqa: B008
):
    file_bytes = await file.read()
    try:
        controller.set_profile_picture(file_bytes, file.content_type)
    except ProfilePictureError as e:
        logger.error("Profile picture rejected for file=%s: %s", file.filename, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return controller.render()


@router.post("/submit", response_model=DirectoryView)
async def submit_form(controller: DirectoryController = Depends(get_controller)):  # noqa: B008
    try:
        await controller.submit()
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()


@router.delete("/employees/{employee_id}", response_model=DirectoryView)
async def delete_from_directory(
    employee_id: int,
    confirmed: bool = False,
    controller: DirectoryController = Depends(get_controller),  # noqa: B008
):
    try:
        await controller.delete(employee_id, confirmed=confirmed)
    except InvalidTransitionError as err:
        raise _conflict(err) from err
    return controller.render()
