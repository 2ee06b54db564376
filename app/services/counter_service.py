"""
Servicio de Contadores
Formato de códigos de contador y cálculo de registros netos del día.

Ambas funciones son puras: la vista previa del formulario y el payload de
envío las llaman con los mismos argumentos y obtienen el mismo resultado.
"""

from dataclasses import dataclass
from typing import Optional

from app.constants.report import CODE_PLACEHOLDER, COUNTER_CODE_WIDTH, CounterKind
from app.schemas.report import ReportFormData


def format_counter_code(
    kind: CounterKind | str,
    station_number: Optional[str],
    counter: Optional[str],
    transaction_digit: Optional[str],
) -> str:
    """
    Genera el código canónico de un contador.

    Formato: {Kind}-{Estación}-{Contador a 4 dígitos}-{Trámite}

    Args:
        kind: "C" o "R"
        station_number: Número de estación (5 dígitos)
        counter: Valor del contador (1 a 4 dígitos)
        transaction_digit: Dígito de trámite

    Returns:
        El código, o CODE_PLACEHOLDER si falta algún dato

    Example:
        >>> format_counter_code("C", "10795", "100", "3")
        'C-10795-0100-3'
    """
    kind_value = kind.value if isinstance(kind, CounterKind) else kind
    if not kind_value or not station_number or not counter or not transaction_digit:
        return CODE_PLACEHOLDER

    return (
        f"{kind_value}-{station_number}-"
        f"{counter.zfill(COUNTER_CODE_WIDTH)}-{transaction_digit}"
    )


def _parse_count(value: Optional[str]) -> Optional[int]:
    value = (value or "").strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def calculate_registers(
    initial: Optional[str], final: Optional[str], skips: Optional[str] = None
) -> int:
    """
    Calcula los registros netos: max(0, final - inicial - saltos).

    Saltos vacíos cuentan como 0. Si algún contador está vacío o no es
    numérico el resultado es 0; un resultado negativo se recorta a 0.
    """
    initial_value = _parse_count(initial)
    final_value = _parse_count(final)
    if initial_value is None or final_value is None:
        return 0

    if skips is None or not skips.strip():
        skips_value = 0
    else:
        parsed_skips = _parse_count(skips)
        if parsed_skips is None:
            return 0
        skips_value = parsed_skips

    return max(0, final_value - initial_value - skips_value)


@dataclass(frozen=True)
class ReportPreview:
    """Valores derivados del borrador, recalculados en cada cambio."""

    codigo_inicial_c: str
    codigo_final_c: str
    codigo_inicial_r: str
    codigo_final_r: str
    registro_c: int
    registro_r: int


def build_preview(data: ReportFormData) -> ReportPreview:
    """Deriva los cuatro códigos y los dos conteos de un borrador."""
    station = data.nro_estacion
    return ReportPreview(
        codigo_inicial_c=format_counter_code(
            CounterKind.C, station, data.contador_inicial_c, data.nro_tramite_c
        ),
        codigo_final_c=format_counter_code(
            CounterKind.C, station, data.contador_final_c, data.nro_tramite_c
        ),
        codigo_inicial_r=format_counter_code(
            CounterKind.R, station, data.contador_inicial_r, data.nro_tramite_r
        ),
        codigo_final_r=format_counter_code(
            CounterKind.R, station, data.contador_final_r, data.nro_tramite_r
        ),
        registro_c=calculate_registers(
            data.contador_inicial_c, data.contador_final_c, data.nro_saltos_c
        ),
        registro_r=calculate_registers(
            data.contador_inicial_r, data.contador_final_r, data.nro_saltos_r
        ),
    )
