"""Default configuration values.

String values of the form ``${VAR}`` or ``${VAR:default}`` are interpolated
from the environment when the configuration is read.
"""
from typing import Any, Dict

ENV_PREFIX = "HANDLERKIT_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",
    "logging": {
        "level": "${HANDLERKIT_LOG_LEVEL:INFO}",
        "destination": "${HANDLERKIT_LOG_DESTINATION:stdout}",
        "file": {
            "path": "${HANDLERKIT_LOG_FILE:logs/handlerkit.log}",
            "max_size_mb": 10,
            "backup_count": 5,
        },
    },
    "dispatch": {
        "trace_enabled": "${HANDLERKIT_TRACE_ENABLED:true}",
        "max_state_steps": "${HANDLERKIT_MAX_STATE_STEPS:1000}",
        "default_deadline_seconds": "${HANDLERKIT_DEADLINE_SECONDS:}",
        "raise_on_fault": "${HANDLERKIT_RAISE_ON_FAULT:false}",
        "warn_on_unreachable_states": True,
    },
}
