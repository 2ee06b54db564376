from app.schemas.user import (
    Coordinador,
    LoginResponse,
    Operador,
    OperadorAsignado,
    SessionUser,
)
from app.schemas.station import Station
from app.schemas.center import RegistrationCenter
from app.schemas.operator import OperadorInfo, OperadorInfoData
from app.schemas.report import (
    DailyReportPayload,
    ReportFormData,
    ReportHistory,
    ReportHistoryEntry,
)

__all__ = [
    # User schemas
    "Coordinador",
    "LoginResponse",
    "Operador",
    "OperadorAsignado",
    "SessionUser",
    # Directory schemas
    "Station",
    "RegistrationCenter",
    # Operator schemas
    "OperadorInfo",
    "OperadorInfoData",
    # Report schemas
    "DailyReportPayload",
    "ReportFormData",
    "ReportHistory",
    "ReportHistoryEntry",
]
