pytest_plugins = [
    "sidecar.testing.pytest.fixtures",
]
