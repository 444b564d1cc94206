"""
Page Rendering — Jinja2 templates for the gateway hand-off and result pages.
"""
from pathlib import Path

from fastapi.templating import Jinja2Templates

PENDING_ORDER_KEY = "pendingOrder"

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["pending_order_key"] = PENDING_ORDER_KEY


def render_redirect_page(payment_url: str, form_data: dict, pending_order: dict) -> str:
    """Hidden gateway form that stores the pending order, then auto-submits.

    A <noscript> button keeps the hand-off working without JavaScript.
    """
    return templates.get_template("redirect.html").render(
        payment_url=payment_url,
        form_data=form_data,
        pending_order=pending_order,
    )
