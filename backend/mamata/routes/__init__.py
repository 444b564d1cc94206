from mamata.routes.payment import router as payment_router
from mamata.routes.esewa import router as esewa_router
from mamata.routes.checkout import router as checkout_router
from mamata.routes.pages import router as pages_router

__all__ = ["payment_router", "esewa_router", "checkout_router", "pages_router"]
