"""
Configuración centralizada de templates.
"""

import os

from fastapi.templating import Jinja2Templates

APP_DIR = os.path.dirname(os.path.dirname(__file__))


def get_templates() -> Jinja2Templates:
    """
    Instancia Jinja2Templates con los filtros registrados.
    Se crea una sola vez a nivel de módulo.
    """
    templates = Jinja2Templates(directory=os.path.join(APP_DIR, "templates"))
    from app.utils.template_filters import register_filters

    register_filters(templates)
    return templates


templates = get_templates()
