import threading
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from sidecar import config
from sidecar.clients import LambdaInvocationClient
from sidecar.functions import LambdaFunction, WarmingConfig
from sidecar.manager import Manager
from sidecar.results import PendingResult
from tests.unit.descriptors import Resize, Warmed


class BrokenWarming(LambdaFunction):
    def warming_config(self):
        return WarmingConfig.instances(2)

    def before_execution(self, payload):
        raise RuntimeError("unable to prepare warming")


class CustomWarming(LambdaFunction):
    def warming_config(self):
        return WarmingConfig.instances(2).with_payload({"ping": True})


@pytest.fixture
def lines():
    return []


@pytest.fixture
def recording_manager(lines):
    manager = Manager(client=MagicMock())
    manager.add_logger(lines.append)
    manager.fake()
    return manager


class TestWarmer:
    def test_warm_dispatches_instance_count_invocations(self, recording_manager):
        results = recording_manager.warm([Warmed])

        assert len(results) == 3
        assert all(isinstance(result, PendingResult) for result in results)
        recording_manager.assert_executed_count(Warmed, 3)
        assert recording_manager.session.executions_of("SC-app-testing-Warmed") == [
            {"warming": True}
        ] * 3

    def test_warm_with_custom_payload(self, recording_manager):
        recording_manager.warm([CustomWarming])

        recording_manager.assert_executed_count(CustomWarming, 2)
        recording_manager.assert_executed(CustomWarming, {"ping": True})

    def test_functions_without_warming_are_skipped(self, recording_manager, lines):
        assert recording_manager.warm([Resize]) == []

        recording_manager.assert_not_executed(Resize)
        assert lines == []

    def test_zero_instances_are_skipped(self, recording_manager):
        class Cold(LambdaFunction):
            def warming_config(self):
                return WarmingConfig.instances(0)

        assert recording_manager.warm([Cold]) == []
        recording_manager.assert_not_executed(Cold)

    def test_warm_default_functions(self, recording_manager, monkeypatch):
        functions = ["tests.unit.descriptors:Warmed", "tests.unit.descriptors.Resize"]
        monkeypatch.setattr(config, "SIDECAR_FUNCTIONS", functions)

        recording_manager.warm()

        recording_manager.assert_executed_count(Warmed, 3)
        recording_manager.assert_not_executed(Resize)

    def test_warm_nothing_configured(self, recording_manager):
        assert recording_manager.warm() == []
        assert len(recording_manager.session) == 0

    def test_failure_of_one_function_does_not_stop_others(self, recording_manager, lines):
        results = recording_manager.warm([BrokenWarming, Warmed])

        assert len(results) == 3
        recording_manager.assert_executed_count(Warmed, 3)
        assert "          ↳ Warming failed: unable to prepare warming" in lines

    def test_unresolvable_reference_does_not_stop_others(self, recording_manager, lines):
        results = recording_manager.warm(["tests.unit.descriptors:Unknown", Warmed])

        assert len(results) == 3
        recording_manager.assert_executed_count(Warmed, 3)
        assert lines[0].startswith("[Sidecar] Skipped warming of 'tests.unit.descriptors:Unknown'")

    def test_unresolvable_default_function_does_not_stop_others(
        self, recording_manager, monkeypatch
    ):
        functions = ["unknown-function", "tests.unit.descriptors:Warmed"]
        monkeypatch.setattr(config, "SIDECAR_FUNCTIONS", functions)

        recording_manager.warm()

        recording_manager.assert_executed_count(Warmed, 3)

    def test_progress_is_logged(self, recording_manager, lines):
        recording_manager.warm([Warmed])

        assert lines == [
            "[Sidecar] Warming 3 instance(s) of SC-app-testing-Warmed.",
            "          ↳ Dispatched 3 warming invocation(s).",
        ]

    def test_warm_does_not_wait_for_invocations(self):
        release = threading.Event()
        boto_client = MagicMock()

        def _invoke(**kwargs):
            assert release.wait(timeout=5)
            return {"StatusCode": 200, "Payload": b"null"}

        boto_client.invoke.side_effect = _invoke
        manager = Manager(client=LambdaInvocationClient(boto_client, max_workers=4))

        results = manager.warm([Warmed])

        assert len(results) == 3
        assert not any(result.done() for result in results)

        release.set()
        for result in results:
            result.settled()
        assert boto_client.invoke.call_count == 3
        for call in boto_client.invoke.call_args_list:
            assert call.kwargs["FunctionName"] == "SC-app-testing-Warmed:active"
            assert call.kwargs["Payload"] == b'{"warming": true}'
        manager.shutdown()

    def test_failed_warming_invocations_are_swallowed(self):
        boto_client = MagicMock()
        boto_client.invoke.side_effect = ClientError(
            {"Error": {"Code": "ServiceException"}, "ResponseMetadata": {"HTTPStatusCode": 500}},
            "Invoke",
        )
        manager = Manager(client=LambdaInvocationClient(boto_client, max_workers=4))

        results = manager.warm([Warmed])

        assert len(results) == 3
        for result in results:
            with pytest.raises(ClientError):
                result.settled()
        manager.shutdown()


class TestWarmingConfig:
    def test_defaults(self):
        warming_config = WarmingConfig()

        assert not warming_config
        assert warming_config.payloads() == []
        assert warming_config.payload == {"warming": True}

    def test_instances(self):
        warming_config = WarmingConfig.instances(3)

        assert warming_config
        assert warming_config.payloads() == [{"warming": True}] * 3

    def test_negative_instances(self):
        with pytest.raises(ValueError):
            WarmingConfig(instance_count=-1)
