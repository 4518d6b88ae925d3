from concurrent.futures import Future

from sidecar.functions import LambdaFunction
from sidecar.results import PendingResult, SettledResult
from tests.unit.descriptors import Resize, Thumbnail


class TestLambdaFunction:
    def test_name_defaults_to_class_name(self):
        assert Resize().name() == "Resize"
        assert Thumbnail().name() == "image-thumbnail"

    def test_name_with_prefix(self):
        assert Resize().prefix() == "SC-app-testing-"
        assert Resize().name_with_prefix() == "SC-app-testing-Resize"
        assert Thumbnail().name_with_prefix() == "SC-app-testing-image-thumbnail"

    def test_default_hooks(self):
        function = Resize()

        assert function.prepare_payload({"width": 100}) == {"width": 100}
        assert function.before_execution({}) is None
        assert function.after_execution({}, SettledResult({})) is None
        assert function.warming_config() is None

    def test_to_result(self):
        function = Resize()

        settled = function.to_result({"StatusCode": 200, "Payload": b'"ok"'})
        assert isinstance(settled, SettledResult)
        assert settled.function is function
        assert function.to_result(settled) is settled

        pending = function.to_result(Future())
        assert isinstance(pending, PendingResult)
        assert pending.function is function

    def test_repr(self):
        assert repr(Resize()) == "Resize()"

    def test_descriptors_are_stateless(self):
        function = LambdaFunction()
        assert function.name_with_prefix() == function.name_with_prefix()
        assert vars(function) == {}
