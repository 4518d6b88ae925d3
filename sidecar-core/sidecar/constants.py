import os

# folder holding the .env profiles loaded by config.load_environment
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".sidecar")

# default encoding for payloads sent to and received from Lambda
DEFAULT_ENCODING = "utf-8"

TRUE_STRINGS = ("1", "true", "True")

# log levels accepted by SIDECAR_LOG
LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "warning")
SIDECAR_LOG_TRACE = "trace"
TRACE_LOG_LEVELS = [SIDECAR_LOG_TRACE]

# default AWS region, used if neither SIDECAR_REGION nor AWS_DEFAULT_REGION is set
AWS_REGION_US_EAST_1 = "us-east-1"

# maximum length of a Lambda function name
MAX_FUNCTION_NAME_LENGTH = 64

# prefix of every function name deployed by sidecar
FUNCTION_NAME_PREFIX = "SC"

# alias pointing to the currently active version of a function
DEFAULT_FUNCTION_ALIAS = "active"

# Lambda invocation types
INVOCATION_TYPE_REQUEST_RESPONSE = "RequestResponse"
INVOCATION_TYPE_EVENT = "Event"

# include the tail of the execution log in the invocation response
LOG_TYPE_TAIL = "Tail"

# error code and HTTP status returned by Lambda for unknown functions or aliases
ERROR_CODE_RESOURCE_NOT_FOUND = "ResourceNotFoundException"
HTTP_STATUS_NOT_FOUND = 404

# payload sent to functions that do not configure a warming payload
DEFAULT_WARMING_PAYLOAD = {"warming": True}

# prefixes of the log lines printed by the sidecar logger sink
LOG_PREFIX = "[Sidecar]"
SUBLOG_PREFIX = "          ↳"
