from pydantic import BaseModel, computed_field
from datetime import date
from typing import List, Optional
from app.schemas.base import ApiRecordSchema


class ReportFormData(BaseModel):
    """
    Borrador del reporte diario tal como lo edita el operador.

    Todos los campos son texto crudo del formulario; la validación vive en
    app.utils.validators y nunca lanza excepciones.
    """

    fecha_reporte: str = ""
    nro_estacion: str = ""
    contador_inicial_c: str = ""
    contador_final_c: str = ""
    contador_inicial_r: str = ""
    contador_final_r: str = ""
    nro_tramite_c: str = "0"
    nro_tramite_r: str = "0"
    nro_saltos_c: str = ""
    nro_saltos_r: str = ""
    incidencias: str = ""
    observaciones: str = ""


# Field names accepted from partial (HTMX) form updates
REPORT_FORM_FIELDS = tuple(ReportFormData.model_fields.keys())


class DailyReportPayload(BaseModel):
    """Payload enviado a POST /api/reportesdiarios/"""

    fecha_reporte: str
    contador_inicial_c: str
    contador_final_c: str
    registro_c: int
    contador_inicial_r: str
    contador_final_r: str
    registro_r: int
    incidencias: str
    observaciones: str
    fecha_registro: str
    sincronizar: bool = True
    estado: str
    operador: int
    estacion: int
    centro_empadronamiento: int


class ReportHistoryEntry(ApiRecordSchema):
    id_reporte: int
    fecha_reporte: str
    fecha_registro: str = ""
    codigo_estacion: str = ""
    nro_estacion: int
    registro_c: int = 0
    registro_r: int = 0
    punto_empadronamiento: str = ""
    municipio: str = ""
    provincia: str = ""
    departamento: str = ""
    nombre_ruta: str = ""
    incidencias: str = ""
    observaciones: str = ""

    @computed_field
    def estado_actividad(self) -> str:
        if self.registro_c > 0 and self.registro_r > 0:
            return "Activo"
        if self.registro_c > 0 or self.registro_r > 0:
            return "Parcial"
        return "Sin registros"

    @property
    def report_date(self) -> Optional[date]:
        """Fecha del reporte sin hora; acepta 'YYYY-MM-DD' o ISO completo."""
        try:
            return date.fromisoformat(self.fecha_reporte[:10])
        except ValueError:
            return None


class ReportHistory(ApiRecordSchema):
    nombre_operador: str = ""
    total_reportes: int = 0
    data: List[ReportHistoryEntry] = []
