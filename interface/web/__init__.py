"""REST API: resource table, FastAPI app factory and uvicorn runner."""
from interface.web.app import create_app
from interface.web.resources import RESOURCES, Resource
from interface.web.server import WebServer

__all__ = ["RESOURCES", "Resource", "WebServer", "create_app"]
