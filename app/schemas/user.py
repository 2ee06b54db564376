from pydantic import computed_field
from typing import List, Optional
from app.schemas.base import ApiRecordSchema


class Ruta(ApiRecordSchema):
    id: int
    nombre: str


class Operador(ApiRecordSchema):
    id_operador: int
    ruta: Ruta
    id_estacion: int
    nro_estacion: int
    tipo_operador: str


class Coordinador(ApiRecordSchema):
    id: int
    nombre: str
    apellido_paterno: str
    apellido_materno: Optional[str] = None
    celular: Optional[str] = None
    cantidad_operadores: int = 0

    @computed_field
    def nombre_completo(self) -> str:
        parts = [self.nombre, self.apellido_paterno, self.apellido_materno]
        return " ".join(p for p in parts if p)


class OperadorAsignado(ApiRecordSchema):
    """Operador listado bajo un coordinador"""

    id: int
    id_operador: int
    tipo_operador: str
    ruta: str
    nro_estacion: int
    username: str
    email: str = ""


class SessionUser(ApiRecordSchema):
    """Usuario autenticado tal como lo devuelve el endpoint de login"""

    id: int
    username: str
    email: str = ""
    groups: List[str] = []
    operador: Optional[Operador] = None
    coordinador: Optional[Coordinador] = None
    operadores_asignados: List[OperadorAsignado] = []

    @property
    def primary_group(self) -> Optional[str]:
        return self.groups[0] if self.groups else None


class LoginResponse(ApiRecordSchema):
    refresh: str
    access: str
    user: SessionUser
