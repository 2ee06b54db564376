"""
Utilidades de validación del reporte diario.

Este módulo contiene:

1. **Validadores de Campo**: reglas estructurales de cada campo del formulario
2. **Validadores Cruzados**: reglas entre campos (final >= inicial)
3. **Validador de Formulario**: combina ambos en un mapa campo → errores

Patrones de Validación:
-----------------------
- **Patrón de Solo Errores**: las funciones devuelven una lista de mensajes
  (vacía si el valor es válido). Nunca lanzan excepciones: un error de
  validación es una condición local y recuperable que solo bloquea el envío.

- **Patrón de Mapa**: validate_report_form() devuelve dict campo → mensajes,
  con entradas solo para los campos con errores.
"""

import re
from datetime import date
from typing import Optional

from app.content import FIELD_LABELS, VALIDATION_MESSAGES
from app.schemas.report import ReportFormData

# ASCII-only patterns; \d would also accept non-latin digits
STATION_NUMBER_RE = re.compile(r"[0-9]{5}")
COUNTER_VALUE_RE = re.compile(r"[0-9]{1,4}")
TRANSACTION_DIGIT_RE = re.compile(r"[0-9]")
SKIP_COUNT_RE = re.compile(r"[0-9]+")

COUNTER_FIELDS = (
    "contador_inicial_c",
    "contador_final_c",
    "contador_inicial_r",
    "contador_final_r",
)

# (kind, initial field, final field) pairs for the cross-field rule
COUNTER_PAIRS = (
    ("C", "contador_inicial_c", "contador_final_c"),
    ("R", "contador_inicial_r", "contador_final_r"),
)

# ============================================================
# SECCIÓN 1: Validadores de Campo
# ============================================================


def is_station_number(value: Optional[str]) -> bool:
    """True si el valor tiene exactamente 5 dígitos ASCII."""
    return bool(value) and STATION_NUMBER_RE.fullmatch(value) is not None


def validate_report_date(value: Optional[str]) -> list[str]:
    """
    Valida la fecha del reporte (formato YYYY-MM-DD, como el input date).

    Returns:
        Lista de mensajes de error (vacía si es válida)
    """
    if not value:
        return [VALIDATION_MESSAGES["fecha_required"]]
    try:
        date.fromisoformat(value)
    except ValueError:
        return [VALIDATION_MESSAGES["fecha_invalid"]]
    return []


def validate_station_number(value: Optional[str]) -> list[str]:
    if not value:
        return [VALIDATION_MESSAGES["station_required"]]
    if not is_station_number(value):
        return [VALIDATION_MESSAGES["station_format"]]
    return []


def validate_counter_value(value: Optional[str], field: str) -> list[str]:
    """
    Valida un contador: requerido, de 1 a 4 dígitos.

    Args:
        value: Texto ingresado
        field: Nombre del campo (para el mensaje de requerido)
    """
    if not value:
        label = FIELD_LABELS.get(field, field)
        label = label[0].lower() + label[1:]
        return [VALIDATION_MESSAGES["counter_required"].format(label=label)]
    if COUNTER_VALUE_RE.fullmatch(value) is None:
        return [VALIDATION_MESSAGES["counter_format"]]
    return []


def validate_transaction_digit(value: Optional[str], kind: str) -> list[str]:
    if not value:
        return [VALIDATION_MESSAGES["tramite_required"].format(kind=kind)]
    if TRANSACTION_DIGIT_RE.fullmatch(value) is None:
        return [VALIDATION_MESSAGES["tramite_format"]]
    return []


def validate_skip_count(value: Optional[str]) -> list[str]:
    """Saltos es opcional (vacío = 0), pero si se ingresa debe ser entero >= 0."""
    if not value:
        return []
    if SKIP_COUNT_RE.fullmatch(value) is None:
        return [VALIDATION_MESSAGES["skips_format"]]
    return []


# ============================================================
# SECCIÓN 2: Validadores Cruzados
# ============================================================


def validate_counter_order(initial: str, final: str, kind: str) -> list[str]:
    """
    Valida que el contador final no sea menor que el inicial.

    Solo se evalúa cuando ambos contadores ya pasaron la validación de
    formato; el error se asocia al campo final.
    """
    if int(final) < int(initial):
        return [VALIDATION_MESSAGES["final_lt_initial"].format(kind=kind)]
    return []


# ============================================================
# SECCIÓN 3: Validador de Formulario
# ============================================================


def validate_report_form(data: ReportFormData) -> dict[str, list[str]]:
    """
    Valida todo el borrador del reporte diario.

    Patrón: Mapa (campo → lista de errores)

    Args:
        data: Borrador actual

    Returns:
        Diccionario con solo los campos inválidos; vacío si todo es válido
    """
    errors: dict[str, list[str]] = {}

    def add(field: str, messages: list[str]) -> None:
        if messages:
            errors.setdefault(field, []).extend(messages)

    add("fecha_reporte", validate_report_date(data.fecha_reporte))
    add("nro_estacion", validate_station_number(data.nro_estacion))

    for field in COUNTER_FIELDS:
        add(field, validate_counter_value(getattr(data, field), field))

    add("nro_tramite_c", validate_transaction_digit(data.nro_tramite_c, "C"))
    add("nro_tramite_r", validate_transaction_digit(data.nro_tramite_r, "R"))
    add("nro_saltos_c", validate_skip_count(data.nro_saltos_c))
    add("nro_saltos_r", validate_skip_count(data.nro_saltos_r))

    for kind, initial_field, final_field in COUNTER_PAIRS:
        if initial_field in errors or final_field in errors:
            continue
        add(
            final_field,
            validate_counter_order(
                getattr(data, initial_field), getattr(data, final_field), kind
            ),
        )

    return errors
