"""
Adapter for HTTP framework (FastAPI).
Isolates FastAPI-specific imports to make library replacement easier.
"""
from fastapi import FastAPI, APIRouter, Path, Request, Depends, Header
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException


class HTTPFrameworkAdapter:
    """Adapter for HTTP framework operations."""

    def __init__(self):
        self.FastAPI = FastAPI
        self.APIRouter = APIRouter
        self.StarletteHTTPException = StarletteHTTPException
        self.Path = Path
        self.Request = Request
        self.Depends = Depends
        self.Header = Header
        self.RequestValidationError = RequestValidationError
        self.JSONResponse = JSONResponse
        self.Response = Response

    def create_app(self, *args, **kwargs) -> FastAPI:
        """Create a FastAPI application instance."""
        return self.FastAPI(*args, **kwargs)

    def create_router(self, *args, **kwargs) -> APIRouter:
        """Create an APIRouter instance."""
        return self.APIRouter(*args, **kwargs)
