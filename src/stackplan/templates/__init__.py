"""Built-in stack templates."""

from .web_service import WebServiceOptions, web_service_template

__all__ = ["WebServiceOptions", "web_service_template"]
