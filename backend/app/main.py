# backend/app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.calendar import router as calendar_router
from backend.app.api.emails import router as emails_router
from backend.app.api.schedule import router as schedule_router
from backend.app.api.tasks import router as tasks_router
from day_planner.errors import DecodeError, MissingCredentialsError, ProviderFetchError

app = FastAPI(title="day-planner API")
app.include_router(emails_router, prefix="/api")
app.include_router(schedule_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(calendar_router, prefix="/api")


@app.exception_handler(MissingCredentialsError)
async def missing_credentials(_request: Request, exc: MissingCredentialsError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"ok": False, "error": str(exc)})


@app.exception_handler(ProviderFetchError)
async def provider_failed(_request: Request, exc: ProviderFetchError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"ok": False, "source": exc.source, "error": str(exc)},
    )


@app.exception_handler(DecodeError)
async def undecodable_message(_request: Request, exc: DecodeError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"ok": False, "error": str(exc)})
