import os

from sidecar.constants import AWS_REGION_US_EAST_1

# Credentials used in the test suite
# These can be overridden if the tests are being run against AWS
TEST_AWS_ACCESS_KEY_ID = os.getenv("TEST_AWS_ACCESS_KEY_ID") or "test"
TEST_AWS_SECRET_ACCESS_KEY = os.getenv("TEST_AWS_SECRET_ACCESS_KEY") or "test"
TEST_AWS_REGION_NAME = os.getenv("TEST_AWS_REGION_NAME") or AWS_REGION_US_EAST_1

# Environment name used for function names in the test suite
TEST_SIDECAR_ENV = os.getenv("TEST_SIDECAR_ENV") or "testing"
