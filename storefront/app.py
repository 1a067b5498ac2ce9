# module storefront.app
"""
Instance FastAPI de l'application (construite par la factory).
Les logs des modules passent par la configuration de logging d'uvicorn.
"""
from storefront.app_setup.factory import create_app

app = create_app()
