from pydantic import ConfigDict
from app.schemas.base import ApiRecordSchema


class RegistrationCenter(ApiRecordSchema):
    """Centro de empadronamiento (provincia → municipio → punto)"""

    id: int
    provincia: str
    municipio: str
    punto_de_empadronamiento: str
    id_ruta: int
    nombre_ruta: str

    model_config = ConfigDict(extra="ignore", frozen=True)
