"""
Filtros Jinja2 compartidos.
"""

from datetime import date, datetime


def date_filter(value, format_string="%d/%m/%Y"):
    """Formatea date/datetime o un string ISO; si no se puede, lo deja igual."""
    if value == "now":
        value = datetime.now()
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, (date, datetime)):
        return value.strftime(format_string)
    return value


def station_number(value):
    """Número de estación con 5 dígitos (00042)."""
    if value is None or value == "":
        return ""
    return str(value).zfill(5)


def thousands(value):
    """Separador de miles con punto: 12345 → 12.345"""
    try:
        return f"{int(value):,}".replace(",", ".")
    except (TypeError, ValueError):
        return value


def register_filters(templates):
    """
    Registra los filtros en una instancia Jinja2Templates.

    Uso:
        templates = Jinja2Templates(directory="templates")
        register_filters(templates)
    """
    templates.env.filters["date"] = date_filter
    templates.env.filters["station_number"] = station_number
    templates.env.filters["thousands"] = thousands
