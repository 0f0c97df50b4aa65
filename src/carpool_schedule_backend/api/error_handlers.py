'''
Maps validation failures to HTTP responses.
'''
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..common.exceptions import ScheduleValidationError
from ..common.logger import log


async def schedule_validation_error_handler(request: Request, exc: ScheduleValidationError) -> JSONResponse:
    """Returns the error envelope with the status code carried by the exception."""
    log.info(f"Validation failure {exc.code} ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScheduleValidationError, schedule_validation_error_handler)
