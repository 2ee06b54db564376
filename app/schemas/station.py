from pydantic import ConfigDict
from typing import Optional
from app.schemas.base import ApiRecordSchema


class Station(ApiRecordSchema):
    """
    Estación de empadronamiento del directorio remoto.
    Se trata como snapshot inmutable durante la vida del formulario.
    """

    id: int
    codigo_equipo: str
    tipo_estacion: str
    nro_estacion: int
    contador_r: int = 0
    contador_c: int = 0
    id_llave: Optional[int] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def padded_number(self) -> str:
        return str(self.nro_estacion).zfill(5)
