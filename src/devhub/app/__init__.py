"""
App - Dashboard HTTP layer.

Example:
    from devhub.app import create_app

    app = create_app()
    uvicorn.run(app, host="127.0.0.1", port=9300)
"""

from .factory import create_app
from .routes import router

__all__ = ["create_app", "router"]
