# Portal de Empadronamiento - Content Configuration
# All user-facing text, labels and messages

SITE = {
    "name": "Empadronamiento",
    "title": "Portal de Empadronamiento",
    "subtitle": "Registro diario de operadores",
}

ROLE_LABELS = {
    "Operador": "Operador",
    "Coordinador": "Coordinador",
}

# ============================================================
# Login
# ============================================================

LOGIN_ERRORS = {
    "invalid_credentials": "Usuario o contraseña incorrectos",
    "wrong_role": "El usuario no tiene el rol seleccionado",
    "operator_missing": "El operador no tiene información asignada",
    "station_missing": "El operador no tiene una estación asignada. Contacte a soporte.",
    "coordinator_missing": "El coordinador no tiene información asignada",
    "rate_limited": "Muchos intentos. Intente nuevamente en {minutes} minuto(s).",
    "generic": "Error al iniciar sesión",
    "required": "Usuario y contraseña son requeridos",
}

# ============================================================
# Daily report form
# ============================================================

FIELD_LABELS = {
    "fecha_reporte": "Fecha del reporte",
    "nro_estacion": "Número de estación",
    "contador_inicial_c": "Contador inicial C",
    "contador_final_c": "Contador final C",
    "contador_inicial_r": "Contador inicial R",
    "contador_final_r": "Contador final R",
    "nro_tramite_c": "N° de trámite C",
    "nro_tramite_r": "N° de trámite R",
    "nro_saltos_c": "Saltos C",
    "nro_saltos_r": "Saltos R",
    "incidencias": "Incidencias",
    "observaciones": "Observaciones",
}

VALIDATION_MESSAGES = {
    "fecha_required": "La fecha es requerida",
    "fecha_invalid": "La fecha no es válida",
    "station_required": "El número de estación es requerido",
    "station_format": "Debe ser un número de exactamente 5 dígitos",
    "counter_required": "El {label} es requerido",
    "counter_format": "Debe ser un número de hasta 4 dígitos",
    "tramite_required": "El número de trámite {kind} es requerido",
    "tramite_format": "Debe ser un solo dígito",
    "skips_format": "Debe ser un número entero no negativo",
    "final_lt_initial": "El contador final {kind} no puede ser menor que el inicial",
}

REPORT_MESSAGES = {
    "center_required": "Debe seleccionar un centro de empadronamiento",
    "station_unresolved": "ID de estación no disponible",
    "not_dirty": "No hay cambios para enviar",
    "invalid": "Corrija los campos marcados antes de enviar",
    "submit_failed": "Error al enviar el reporte",
    "submitted": "Reporte enviado correctamente",
    "in_flight": "Ya hay un envío en curso",
    "unlock_confirm": (
        "ADVERTENCIA: Al desbloquear podrá cambiar el número de estación. "
        "Solo modifíquelo si realizó registros desde otra estación que no sea "
        "su estación asignada. Se verificará el número ingresado."
    ),
    "clear_confirm": "¿Está seguro de que desea limpiar todos los campos?",
}

STATION_MESSAGES = {
    "not_found": "El número de estación {number} no existe en el sistema",
    "lookup_failed": "Error al validar estación",
    "directory_failed": "Error al cargar lista de estaciones",
}

CENTER_MESSAGES = {
    "load_failed": "Error al cargar centros de empadronamiento",
}

# ============================================================
# Operator info and history
# ============================================================

OPERATOR_MESSAGES = {
    "info_failed": "Error al cargar la información del operador",
    "history_failed": "Error al cargar historial",
    "delete_failed": "Error al eliminar el reporte",
    "deleted": "Reporte eliminado correctamente",
    "delete_confirm": "¿Está seguro de que desea eliminar este reporte? Esta acción no se puede deshacer.",
}

ACTIVITY_STATUS_COLORS = {
    "Activo": "green",
    "Parcial": "blue",
    "Sin registros": "gray",
}

# ============================================================
# Coordinator dashboard
# ============================================================

COMPLETION_LABELS = {
    "completed": "Reporte enviado",
    "pending": "Pendiente",
    "unknown": "Sin información",
}

COMPLETION_COLORS = {
    "completed": "green",
    "pending": "yellow",
    "unknown": "gray",
}

COMMON_LABELS = {
    "logout": "Cerrar sesión",
    "unauthorized": "Acceso no autorizado",
    "session_expired": "Su sesión expiró. Inicie sesión nuevamente.",
}
