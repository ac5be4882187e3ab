from dotenv import load_dotenv
load_dotenv()

from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException  # type: ignore
from fastapi.middleware.cors import CORSMiddleware  # type: ignore
from pydantic import BaseModel, Field  # type: ignore

import config
from cir.model import EntryPointPolicy
from errors import (
    InputNotFound,
    InvalidPolicy,
    MultipleEntryPoints,
    NoEntryPoint,
    NoSourceFiles,
    SourceDecodeError,
    SourceLexError,
    TransformError,
    WriteFailure,
)
from registry import adapter_for
from transform.merger import merge_sources
from transform.splitter import split_source
from workspace import SubmissionWorkspace

config.setup_logging()

app = FastAPI(title="Multi-class Java Transformer (split / merge)", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# error kind -> HTTP status
_STATUS = {
    InputNotFound: 404,
    NoSourceFiles: 404,
    NoEntryPoint: 422,
    MultipleEntryPoints: 409,
    SourceLexError: 400,
    SourceDecodeError: 400,
    InvalidPolicy: 400,
    WriteFailure: 500,
}


def _http_error(e: TransformError) -> HTTPException:
    return HTTPException(status_code=_STATUS.get(type(e), 500), detail=e.to_dict())


# ==============================================================================
# Models
# ==============================================================================
class SplitRequest(BaseModel):
    code: str
    filename: Optional[str] = None


class SplitResponse(BaseModel):
    files: Dict[str, str]
    type_names: List[str]


class MergeRequest(BaseModel):
    files: Dict[str, str] = Field(..., description="file name -> source, in enumeration order")
    entry_point_policy: Optional[EntryPointPolicy] = None


class MergeResponse(BaseModel):
    code: str
    main_class_name: str
    imports: List[str]
    other_class_names: List[str]
    demoted_entry_points: List[str]


class WorkspaceRequest(BaseModel):
    problem_id: int
    problem_name: str = Field(..., min_length=1)
    extension: str = config.SOURCE_EXTENSION
    skeleton: str = ""
    override: bool = False
    entry_point_policy: Optional[EntryPointPolicy] = None


class WorkspaceOpenResponse(BaseModel):
    submission_path: str
    split_dir: Optional[str] = None
    files: List[str]


class WorkspacePrepareResponse(BaseModel):
    submission_path: str
    merged: bool
    main_class_name: Optional[str] = None


# ==============================================================================
# Routes
# ==============================================================================
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/split", response_model=SplitResponse)
def split_code(req: SplitRequest) -> SplitResponse:
    if req.filename and adapter_for(req.filename) is None:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {req.filename}")
    try:
        result = split_source(req.code)
    except TransformError as e:
        raise _http_error(e) from e
    return SplitResponse(files=result.files, type_names=result.type_names)


@app.post("/merge", response_model=MergeResponse)
def merge_code(req: MergeRequest) -> MergeResponse:
    try:
        result = merge_sources(req.files, req.entry_point_policy)
    except TransformError as e:
        raise _http_error(e) from e
    return MergeResponse(
        code=result.content,
        main_class_name=result.main_class_name,
        imports=result.imports,
        other_class_names=result.other_class_names,
        demoted_entry_points=result.demoted_entry_points,
    )


def _workspace(req: WorkspaceRequest) -> SubmissionWorkspace:
    return SubmissionWorkspace(
        problem_id=req.problem_id,
        problem_name=req.problem_name,
        extension=req.extension,
        skeleton=req.skeleton,
    )


@app.post("/workspace/open", response_model=WorkspaceOpenResponse)
def workspace_open(req: WorkspaceRequest) -> WorkspaceOpenResponse:
    ws = _workspace(req)
    try:
        files = ws.open_for_editing(override=req.override)
    except TransformError as e:
        raise _http_error(e) from e
    return WorkspaceOpenResponse(
        submission_path=str(ws.path),
        split_dir=str(ws.split_dir) if ws.splittable else None,
        files=[str(f) for f in files],
    )


@app.post("/workspace/prepare", response_model=WorkspacePrepareResponse)
def workspace_prepare(req: WorkspaceRequest) -> WorkspacePrepareResponse:
    ws = _workspace(req)
    try:
        result = ws.prepare_submission(req.entry_point_policy)
    except TransformError as e:
        raise _http_error(e) from e
    return WorkspacePrepareResponse(
        submission_path=str(ws.path),
        merged=result is not None,
        main_class_name=result.main_class_name if result else None,
    )
