"""
Role Constants

User roles recognised by the portal and the dashboard each one lands on.
The role name MUST match the group name returned by the remote API.
"""

import enum


class UserRole(str, enum.Enum):
    OPERADOR = "Operador"
    COORDINADOR = "Coordinador"


# Dashboard path per role
ROLE_HOME_PATHS = {
    UserRole.OPERADOR: "/operador",
    UserRole.COORDINADOR: "/coordinador",
}


def home_path_for(role) -> str:
    """Devuelve la ruta del panel para un rol, o /login si no hay rol."""
    if role is None:
        return "/login"
    try:
        return ROLE_HOME_PATHS[UserRole(role)]
    except ValueError:
        return "/login"
