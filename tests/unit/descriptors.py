"""Function descriptors shared by the unit tests."""
from sidecar.functions import LambdaFunction, WarmingConfig


class Resize(LambdaFunction):
    pass


class Thumbnail(LambdaFunction):
    def name(self):
        return "image-thumbnail"

    def prepare_payload(self, payload):
        return {"size": 64, **payload}


class Warmed(LambdaFunction):
    def warming_config(self):
        return WarmingConfig.instances(3)


class NotADescriptor:
    def name(self):
        return "not-a-descriptor"
