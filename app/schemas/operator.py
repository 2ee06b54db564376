from pydantic import computed_field
from typing import Optional
from app.schemas.base import ApiRecordSchema


class OperadorInfoData(ApiRecordSchema):
    nombre: str = ""
    apellido_paterno: str = ""
    apellido_materno: Optional[str] = None
    celular: Optional[str] = None
    carnet: str = ""
    tipo_operador: str = ""
    nombre_coordinador: Optional[str] = None
    id_estacion: int
    codigo_equipo: str = ""
    modelo_estacion: str = ""
    tipo_estacion: str = ""
    nro_estacion: int
    contador_r: int = 0
    contador_c: int = 0
    punto_de_empadronamiento: str = ""
    municipio: str = ""
    provincia: str = ""
    departamento: str = ""
    nombre_ruta: str = ""

    @computed_field
    def nombre_completo(self) -> str:
        parts = [self.nombre, self.apellido_paterno, self.apellido_materno]
        return " ".join(p for p in parts if p)


class OperadorInfo(ApiRecordSchema):
    """Respuesta de GET /info-operador/{id}/"""

    success: bool = True
    operador_id: int
    data: OperadorInfoData
