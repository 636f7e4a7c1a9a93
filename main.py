from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
import database
from engine import LendingEngine
from errors import LibraryError, StoreError
from logger import get_logger, setup_logging
from queries import QueryService
from schemas import LendingRequest
from sql_stores import SqlUnitOfWork

setup_logging(config.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.init_db()
    yield
    database.engine.dispose()


app = FastAPI(title="Library Lending Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_session_factory() -> Callable[[], Session]:
    return database.Session


def get_lending_engine(session_factory=Depends(get_session_factory)) -> LendingEngine:
    return LendingEngine(lambda: SqlUnitOfWork(session_factory))


def get_query_service(session_factory=Depends(get_session_factory)) -> QueryService:
    return QueryService(lambda: SqlUnitOfWork(session_factory))


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Members

@app.get("/members")
def get_members(queries: QueryService = Depends(get_query_service)):
    members = queries.list_members()
    return JSONResponse(status_code=200, content=jsonable_encoder(members))


@app.get("/members/{code}")
def get_member(code: str, queries: QueryService = Depends(get_query_service)):
    member = queries.get_member(code)
    return JSONResponse(status_code=200, content=jsonable_encoder(member))


# Books

@app.get("/books")
def get_books(available: bool = False, queries: QueryService = Depends(get_query_service)):
    books = queries.list_books(available_only=available)
    return JSONResponse(status_code=200, content=jsonable_encoder(books))


@app.post("/books/borrow")
def borrow_book(body: LendingRequest, lending: LendingEngine = Depends(get_lending_engine)):
    message = lending.borrow(body.member_code, body.book_code)
    return JSONResponse(status_code=200, content={"message": message})


@app.post("/books/return")
def return_book(body: LendingRequest, lending: LendingEngine = Depends(get_lending_engine)):
    message = lending.return_book(body.member_code, body.book_code)
    return JSONResponse(status_code=200, content={"message": message})


# Error Handling

@app.exception_handler(LibraryError)
def library_error_handler(request: Request, exc: LibraryError):
    return get_default_error_response(status_code=exc.status_code, message=exc.message)


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    reasons = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        reasons.append(f"{field}: {error['msg']}" if field else error["msg"])
    return get_default_error_response(status_code=422, message="; ".join(reasons))


@app.exception_handler(StoreError)
@app.exception_handler(SQLAlchemyError)
def store_error_handler(request: Request, exc: Exception):
    logger.exception(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
    return get_default_error_response()


@app.exception_handler(Exception)
def exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return get_default_error_response()


def get_default_error_response(status_code=500, message="Internal Server Error"):
    return JSONResponse(status_code=status_code, content={"message": message})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
