import os
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "quiettime.settings")

django_asgi_app = get_asgi_application()

# FastAPI app (mounted at /api)
from devotional.fastapi_app import api as fastapi_app

from starlette.applications import Starlette
from starlette.routing import Mount

# Single ASGI router:
# - /api/*  -> FastAPI (records, check-ins, scripture, reviews, sessions)
# - everything else -> Django (admin over the cloud document tables)
application = Starlette(
    routes=[
        Mount("/api", app=fastapi_app),
        Mount("/", app=django_asgi_app),
    ]
)
