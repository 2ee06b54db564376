"""
Daily Report Constants

Fixed values shared by the preview, the validator and the submission payload.
"""

import enum


class CounterKind(str, enum.Enum):
    C = "C"
    R = "R"


# Shown instead of a counter code while its inputs are incomplete
CODE_PLACEHOLDER = "-----"

# Status label stamped on every submitted report
REPORT_SUBMITTED_STATUS = "ENVIO REPORTE"

STATION_NUMBER_LENGTH = 5
COUNTER_CODE_WIDTH = 4

# Default text sent when the operator leaves incidents blank
EMPTY_INCIDENTS = "0"
