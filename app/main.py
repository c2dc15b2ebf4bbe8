from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from playground.config import configure_logging, get_settings
from playground.errors import PlaygroundError, PullFailed, PullTimeout, StagingFailure
from playground.models import Result, Submission
from playground.runner import SubmissionRunner, get_default_runner

load_dotenv()
configure_logging()

app = FastAPI(title="Playground Runner", version="1.0.0")


class HealthResponse(BaseModel):
    status: str
    runtime: str
    runtime_ok: bool
    detail: str


class ImagesResponse(BaseModel):
    images: list[str]


def _get_runner() -> SubmissionRunner:
    return get_default_runner()


def _status_for(exc: PlaygroundError) -> int:
    if isinstance(exc, StagingFailure):
        return 400
    if isinstance(exc, PullTimeout):
        return 504
    if isinstance(exc, PullFailed):
        return 502
    return 500


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    runtime = _get_runner().runtime
    runtime_ok, detail = runtime.check_health()
    return HealthResponse(
        status="ok",
        runtime=runtime.executable,
        runtime_ok=runtime_ok,
        detail=detail,
    )


@app.get("/images", response_model=ImagesResponse)
def images() -> ImagesResponse:
    return ImagesResponse(images=sorted(_get_runner().images.loaded))


@app.post("/run", response_model=Result)
def run(payload: Submission) -> Result:
    try:
        return _get_runner().run(payload)
    except PlaygroundError as exc:
        raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Submission execution engine failed: {exc}") from exc


if __name__ == "__main__":
    import uvicorn
    from pathlib import Path

    port = get_settings().port
    project_root = Path(__file__).resolve().parents[1]
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        app_dir=str(project_root),
    )
