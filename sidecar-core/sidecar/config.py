import logging
import os
import time
from typing import List, Optional, Union

from sidecar.constants import (
    AWS_REGION_US_EAST_1,
    CONFIG_DIR,
    DEFAULT_FUNCTION_ALIAS,
    LOG_LEVELS,
    LOG_TYPE_TAIL,
    TRACE_LOG_LEVELS,
    TRUE_STRINGS,
)

# keep track of start time, for performance debugging
load_start_time = time.time()


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    sidecar_log = os.environ.get(env_var_name, "").lower().strip()
    return sidecar_log if sidecar_log in LOG_LEVELS else False


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def parse_list_env(env_var_name: str) -> List[str]:
    """Parse a comma separated env variable into a list of stripped, non-empty items."""
    value = os.environ.get(env_var_name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


def load_environment(profiles: str = None, env=os.environ) -> List[str]:
    """Loads the environment variables from ~/.sidecar/{profile}.env, for each profile listed in the profiles.
    :param env: environment to load profile to. Defaults to `os.environ`
    :param profiles: a comma separated list of profiles to load (defaults to "default")
    :returns str: the list of the actually loaded profiles (might be the fallback)
    """
    if not profiles:
        profiles = "default"

    profiles = [profile.strip() for profile in profiles.split(",")]
    environment = {}
    import dotenv

    for profile in profiles:
        path = os.path.join(CONFIG_DIR, f"{profile}.env")
        if not os.path.exists(path):
            continue
        environment.update(dotenv.dotenv_values(path))

    for k, v in environment.items():
        # we do not want to override the environment
        if k not in env and v is not None:
            env[k] = v

    return profiles


# comma separated list of .env profiles, loaded before any of the variables below are evaluated
SIDECAR_PROFILE = os.environ.get("SIDECAR_PROFILE", "").strip()
LOADED_PROFILES = load_environment(SIDECAR_PROFILE)

# expose sidecar logs, one of LOG_LEVELS
SIDECAR_LOG = eval_log_type("SIDECAR_LOG")

# enable debug output
DEBUG = is_env_true("DEBUG") or SIDECAR_LOG in TRACE_LOG_LEVELS

# name of the application, part of every deployed function name
SIDECAR_APP_NAME = os.environ.get("SIDECAR_APP_NAME", "").strip() or "sidecar"

# environment the functions are deployed to, part of every deployed function name
SIDECAR_ENV = (
    os.environ.get("SIDECAR_ENV", "").strip()
    or os.environ.get("APP_ENV", "").strip()
    or "production"
)

# alias that is invoked, pointing to the activated version of a function
SIDECAR_ALIAS = os.environ.get("SIDECAR_ALIAS", "").strip() or DEFAULT_FUNCTION_ALIAS

# "Tail" includes the last 4 KB of the execution log in each invocation response, "None" disables it
SIDECAR_LOG_TYPE = os.environ.get("SIDECAR_LOG_TYPE", "").strip() or LOG_TYPE_TAIL

# comma separated list of function references (registry names or "module:Class" paths) that are
# warmed when no explicit list is given
SIDECAR_FUNCTIONS = parse_list_env("SIDECAR_FUNCTIONS")

# number of threads used for asynchronous invocations
SIDECAR_MAX_WORKERS = int(os.environ.get("SIDECAR_MAX_WORKERS") or 10)

# custom endpoint for the Lambda API, e.g., a local emulator
SIDECAR_ENDPOINT_URL = os.environ.get("SIDECAR_ENDPOINT_URL", "").strip() or None

# region of the deployed functions
SIDECAR_REGION = (
    os.environ.get("SIDECAR_REGION", "").strip()
    or os.environ.get("AWS_DEFAULT_REGION", "").strip()
    or AWS_REGION_US_EAST_1
)

# explicit credentials; if unset, boto3 resolves credentials from its default chain
SIDECAR_ACCESS_KEY_ID = os.environ.get("SIDECAR_ACCESS_KEY_ID", "").strip() or None
SIDECAR_SECRET_ACCESS_KEY = os.environ.get("SIDECAR_SECRET_ACCESS_KEY", "").strip() or None

# disable the boto retry handler, so transport errors surface on the first failed attempt
SIDECAR_DISABLE_BOTO_RETRIES = is_env_true("SIDECAR_DISABLE_BOTO_RETRIES")


def is_trace_logging_enabled():
    if SIDECAR_LOG:
        return SIDECAR_LOG in TRACE_LOG_LEVELS
    return False


def get_log_level() -> Optional[int]:
    """Level of the sidecar loggers selected by SIDECAR_LOG or DEBUG, or None to leave it to the application."""
    if SIDECAR_LOG:
        if is_trace_logging_enabled():
            return logging.DEBUG
        return logging.getLevelName(SIDECAR_LOG.upper())
    return logging.DEBUG if DEBUG else None


# the application owns the logging setup, only the levels of the library loggers are set here
if get_log_level() is not None:
    logging.getLogger("sidecar").setLevel(get_log_level())
if is_trace_logging_enabled():
    logging.getLogger("botocore").setLevel(logging.DEBUG)

LOG = logging.getLogger(__name__)
if is_trace_logging_enabled():
    load_end_time = time.time()
    LOG.debug(
        "Initializing the configuration took %s ms", int((load_end_time - load_start_time) * 1000)
    )
