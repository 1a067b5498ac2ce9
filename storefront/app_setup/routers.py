"""
Registre central des routers (API v1, admin, health).
"""
from fastapi import FastAPI
from storefront.cart import views as cart_views
from storefront.payments import views as payments_views
from storefront.checkout import views as checkout_views
from storefront.orders import views as orders_views
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    L'ordre n'a pas d'impact sauf conflits de chemins (évités par préfixes).
    """
    # API v1
    app.include_router(cart_views.router)
    app.include_router(payments_views.router)
    app.include_router(checkout_views.router)
    app.include_router(orders_views.router)
    # Admin
    app.include_router(orders_views.admin_router)
    # Health & monitoring
    app.include_router(health_router)
